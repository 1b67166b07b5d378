"""Allow running as ``python -m communal``."""

import sys

from .cli import main

sys.exit(main())
