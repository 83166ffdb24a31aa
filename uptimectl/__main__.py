"""Allow running as python -m uptimectl."""

import sys

from uptimectl.cli import main

sys.exit(main())
