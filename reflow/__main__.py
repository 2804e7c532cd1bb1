"""Run with ``python -m reflow``."""

import sys

from reflow.main import main

sys.exit(main())
