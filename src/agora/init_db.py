"""Create (or with ``--drop``, recreate) every table of the configured database."""

from __future__ import annotations

import argparse
import logging

from agora.core.settings import settings
from agora.db.session import create_tables, drop_tables

logger = logging.getLogger(__name__)


def init_db(*, drop: bool = False) -> None:
    """Initialize the database by creating all tables."""
    if drop:
        logger.warning("Dropping all tables")
        drop_tables()
    create_tables()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--drop", action="store_true", help="drop existing tables first")
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level.upper())
    init_db(drop=args.drop)
    logger.info("Database initialized.")


if __name__ == "__main__":
    main()
