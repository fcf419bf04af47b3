"""Entry point for ``python -m ai_sync``."""
from __future__ import annotations

import sys

from ai_sync.cli._dispatcher import main

if __name__ == "__main__":
    sys.exit(main())
