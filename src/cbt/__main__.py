"""Allow ``python -m cbt``."""
from __future__ import annotations

import sys

from cbt.cli._dispatcher import main

if __name__ == "__main__":
    sys.exit(main())
