"""Allow ``python -m lazylode``."""

import sys

from .cli import main

sys.exit(main())
