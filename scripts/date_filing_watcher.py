#!/usr/bin/env python3
"""Run the date filing watcher from a source checkout.

Installed copies expose the same entry point as the ``datefiler`` command.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from domains.date_filing.cli import main

if __name__ == "__main__":  # pragma: no cover - CLI bridge
    sys.exit(main())
