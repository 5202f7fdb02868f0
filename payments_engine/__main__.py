"""Main entry point for the payments engine"""

import sys

from payments_engine.cli import main

if __name__ == "__main__":
    sys.exit(main())
