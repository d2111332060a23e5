"""Allow ``python -m rtest``."""

import sys

from rtest.cli import main

sys.exit(main())
