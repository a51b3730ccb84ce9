"""Allow ``python -m deporacle``."""

import sys

from .cli import main

sys.exit(main())
