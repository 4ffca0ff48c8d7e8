#!/usr/bin/env python3
"""Cron-triggered Hoarder -> Tana sync script.

Run this script via cron when the daemon mode is not used.

Example crontab entry (every 15 minutes):
    */15 * * * * cd /opt/hoarder-sync && .venv/bin/python scripts/run_sync.py incremental >> /var/log/hoarder_sync.log 2>&1

Usage:
    python scripts/run_sync.py {full,incremental,test,status,daemon} [--limit LIMIT]
"""

from __future__ import annotations

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from hoarder_sync.cli.sync import main  # noqa: E402

if __name__ == "__main__":
    main()
