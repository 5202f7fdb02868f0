#!/usr/bin/env python3
"""
Payments Engine Entry Point

Runs the engine over a transactions CSV file without installing the package:

    python run.py transactions.csv > accounts.csv
"""

import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from payments_engine.cli import main


if __name__ == "__main__":
    sys.exit(main())
