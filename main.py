#!/usr/bin/env python3
"""
Review scheduler
Prints upcoming reviews and today's session progress for a user
"""

import argparse
import logging
from datetime import datetime, timezone

from review_scheduler.config import get_settings
from review_scheduler.core.handlers.review_handlers import ReviewHandlers
from review_scheduler.database import init_db


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--user", required=True, help="User ID to report on")
    parser.add_argument("--db", default=None, help="SQLite database path")
    parser.add_argument(
        "--casual", action="store_true", help="Only count casual items"
    )
    return parser.parse_args(argv)


def main(argv=None):
    """Main application entry point"""
    args = parse_args(argv)
    settings = get_settings()

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    logger = logging.getLogger(__name__)
    logger.info("Starting review scheduler report...")

    handlers = ReviewHandlers(init_db(args.db, settings), settings)

    print(f"Reviews for {args.user}:")
    for bucket in handlers.get_reviews(args.user, True if args.casual else None):
        day = datetime.fromtimestamp(bucket["ts"], tz=timezone.utc).date()
        print(f"  {day}: {bucket['count']}")

    count = handlers.get_session_count(args.user)
    print("Session:")
    for kind in ("new", "due", "review"):
        print(f"  {kind}: {count[f'{kind}_done']}/{count[f'{kind}_total']}")


if __name__ == "__main__":
    main()
