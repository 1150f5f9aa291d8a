"""Allow ``python -m bituin``."""

import sys

from bituin.cli import main

sys.exit(main())
