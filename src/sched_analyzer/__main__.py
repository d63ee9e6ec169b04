"""Allow ``python -m sched_analyzer``."""

import sys

from .cli import main

sys.exit(main())
