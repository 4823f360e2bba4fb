# scripts/run_scheduler.py
"""
Run the reminder scheduler.
Usage:
  python -m scripts.run_scheduler
  python -m scripts.run_scheduler --once
  python -m scripts.run_scheduler --db data/portal.db --interval 5
"""
import os
import sys
import json
import argparse
import logging
from dotenv import load_dotenv
from filelock import FileLock, Timeout

load_dotenv()

from backend.db import StateStore
from backend.notifications import setup_logging
from backend.scheduler import ReminderScheduler
from backend.utils.config import config

logger = logging.getLogger("scripts.run_scheduler")


def lock_path_for(db_path: str) -> str:
    data_dir = os.path.dirname(os.path.abspath(db_path))
    return os.path.join(data_dir, "reminder_scheduler.lock")


def main(argv=None) -> int:
    p = argparse.ArgumentParser(description="Send appointment and medication reminders on a fixed interval.")
    p.add_argument("--db", default=config.DB_PATH, help="SQLite state store path")
    p.add_argument("--interval", type=float, default=config.REMINDER_INTERVAL_MINUTES,
                   help="minutes between scans")
    p.add_argument("--once", action="store_true", help="run a single scan pass and exit")
    args = p.parse_args(argv)

    setup_logging()
    config.validate_config()

    store = StateStore(args.db)
    scheduler = ReminderScheduler(store, interval_minutes=args.interval)
    if not scheduler.enabled:
        return 1

    # One scheduler per state store, single passes included
    lock = FileLock(lock_path_for(args.db), timeout=1)
    try:
        with lock:
            if args.once:
                print(json.dumps(scheduler.run_once(), indent=2))
                return 0
            scheduler.run_forever()
    except Timeout:
        logger.error(f"Another scheduler already holds {lock.lock_file}")
        return 1
    except KeyboardInterrupt:
        scheduler.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
