#!/usr/bin/env python3
"""
Weekly roster - generate, audit and export one week

Usage:
  python scripts/run_week.py --roster config/staff_roster.csv --staff-per-shift 1
  python scripts/run_week.py --next-week --save-seed

Outputs to outputs/ directory.
"""

import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from shift_roster.weekly_run import main

if __name__ == "__main__":
    sys.exit(main())
