"""Graph algorithms over handle-addressed adjacency lists.

Nodes are addressed by their creation index (a dense integer handle) and
edges are stored as per-node lists of handles. Lists rather than sets are
used because parallel edges are meaningful: each instance of a dependency
contributes to the expected value separately.

Both algorithms use an explicit stack instead of recursion so that long
dependency chains cannot exhaust the interpreter stack.

Python 3.13+.
"""

from collections.abc import Sequence
from enum import Enum, auto

from deporacle.diagnostics import TopologicalSortError

__all__ = ["detect_cycles", "topological_sort"]


class _NodeState(Enum):
    """DFS node visitation state."""

    ENTER = auto()  # First visit to node
    EXIT = auto()  # Returning from node (all neighbors processed)


def detect_cycles(adjacency: Sequence[Sequence[int]]) -> list[list[int]]:
    """Detect cycles in a handle-addressed graph using iterative DFS.

    Args:
        adjacency: ``adjacency[u]`` lists the handles ``u`` has edges to.
                   Handles outside ``range(len(adjacency))`` are ignored.

    Returns:
        List of cycles, each a closed path ``[a, b, ..., a]``. Cycles over
        the same node set are reported once. Empty if the graph is acyclic.

    Example:
        >>> detect_cycles([[1], [2], [0]])
        [[0, 1, 2, 0]]
        >>> detect_cycles([[1, 1], [], []])
        []

    Complexity:
        Time: O(V + E)
        Space: O(V)
    """
    size = len(adjacency)
    visited: set[int] = set()
    cycles: list[list[int]] = []
    seen_cycle_keys: set[frozenset[int]] = set()

    for start in range(size):
        if start in visited:
            continue

        path: list[int] = []
        on_path: set[int] = set()
        stack: list[tuple[int, _NodeState]] = [(start, _NodeState.ENTER)]

        while stack:
            node, state = stack.pop()

            if state == _NodeState.EXIT:
                path.pop()
                on_path.discard(node)
                continue

            if node in visited:
                continue

            visited.add(node)
            on_path.add(node)
            path.append(node)
            stack.append((node, _NodeState.EXIT))

            for neighbor in adjacency[node]:
                if not 0 <= neighbor < size:
                    continue
                if neighbor not in visited:
                    stack.append((neighbor, _NodeState.ENTER))
                elif neighbor in on_path:
                    cycle = [*path[path.index(neighbor) :], neighbor]
                    key = frozenset(cycle)
                    if key not in seen_cycle_keys:
                        seen_cycle_keys.add(key)
                        cycles.append(cycle)

    return cycles


def topological_sort(adjacency: Sequence[Sequence[int]]) -> list[int]:
    """Order handles so that for every edge ``u -> v``, ``u`` precedes ``v``.

    The order is deterministic for a given adjacency: roots are explored in
    ascending handle order and neighbors in list order.

    Args:
        adjacency: ``adjacency[u]`` lists the handles ``u`` depends on.

    Returns:
        Every handle in ``range(len(adjacency))`` exactly once.

    Raises:
        TopologicalSortError: If the graph contains a cycle.

    Example:
        >>> topological_sort([[], [0], [1]])
        [2, 1, 0]
    """
    size = len(adjacency)
    finished: list[int] = []
    done: set[int] = set()
    active: set[int] = set()

    for start in range(size):
        if start in done:
            continue

        stack: list[tuple[int, _NodeState]] = [(start, _NodeState.ENTER)]
        while stack:
            node, state = stack.pop()

            if state == _NodeState.EXIT:
                active.discard(node)
                done.add(node)
                finished.append(node)
                continue

            if node in done or node in active:
                continue

            active.add(node)
            stack.append((node, _NodeState.EXIT))
            # Reversed so the first listed neighbor is explored first.
            for neighbor in reversed(adjacency[node]):
                if neighbor in active:
                    cycles = detect_cycles(adjacency)
                    msg = f"Dependency graph contains {len(cycles)} cycle(s): {cycles}"
                    raise TopologicalSortError(msg, cycles)
                if neighbor not in done:
                    stack.append((neighbor, _NodeState.ENTER))

    finished.reverse()
    return finished
