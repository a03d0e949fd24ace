"""Allow ``python -m cmdsvc``."""

import sys

from cmdsvc.cli.cli import main

sys.exit(main())
