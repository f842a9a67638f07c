"""
Clear the configured database and load the demo dataset.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from toiletmap.config import get_settings
from toiletmap.db import SqlDbClient
from toiletmap.sample_data import seed_sample_data

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the Toilet Map database")
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="SQLAlchemy URL (defaults to DATABASE_URL)",
    )
    parser.add_argument(
        "--keep",
        action="store_true",
        help="Do not clear existing users, toilets and reviews first",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    database_url = args.database_url or get_settings().database_url
    if not database_url:
        logger.error("No database configured; set DATABASE_URL or pass --database-url")
        return 1

    db = SqlDbClient(database_url)
    if not args.keep:
        db.reset()
        logger.info("Old data cleared")

    counts = seed_sample_data(db)
    logger.info(
        "Seed complete: %d users, %d toilets, %d reviews",
        counts["users"],
        counts["toilets"],
        counts["reviews"],
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
