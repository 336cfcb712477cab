"""Initialize the database (create tables).

Usage:
    python -m stationdesk.scripts.init_db [--force]
"""
import argparse
import asyncio

from stationdesk.core.db import init_db
from stationdesk.core.logger import setup_logging


def main() -> None:
    parser = argparse.ArgumentParser(description="Create StationDesk tables.")
    parser.add_argument(
        "--force",
        action="store_true",
        help="Back up, drop and re-create all tables",
    )
    args = parser.parse_args()

    setup_logging()
    asyncio.run(init_db(force=args.force))


if __name__ == "__main__":
    main()
