"""Allow ``python -m deployment``."""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
