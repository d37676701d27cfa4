"""Entry point for ``python -m cms_export``."""
from __future__ import annotations

import sys

from .src.cli import main

if __name__ == "__main__":
    sys.exit(main())
