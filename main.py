from __future__ import annotations

import sys

from eventhubs_control.cli import main

if __name__ == "__main__":
    sys.exit(main())
