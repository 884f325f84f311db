#!/usr/bin/env python3
"""
Script to cancel subscriptions that have run past their end date.

Pending and active subscriptions whose endDate is earlier than the reference
time are moved to "cancelled". Intended to run from cron.

Usage:
    python scripts/expire_subscriptions.py [--now 2026-01-31T00:00:00] [--dry-run]
"""

import sys
import argparse
import logging
from datetime import datetime
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from app.core.logging_config import setup_logging
from app.db.mongodb import connect_to_mongodb, close_mongodb_connection, is_connected
from app.services.subscription_service import (
    expire_subscriptions,
    find_expirable_subscriptions,
)
from app.utils.document_helpers import utc_now

# Load environment variables
load_dotenv()

setup_logging()
logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Cancel subscriptions past their end date")
    parser.add_argument(
        "--now",
        type=datetime.fromisoformat,
        default=None,
        help="Reference time in ISO format (default: current UTC time)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List the subscriptions that would be cancelled without changing them",
    )
    return parser.parse_args(argv)


def run(now: datetime, dry_run: bool = False) -> int:
    """
    Expire overdue subscriptions.

    Returns:
        Number of subscriptions cancelled (or that would be, in dry-run mode)
    """
    if dry_run:
        overdue = find_expirable_subscriptions(now)
        for subscription in overdue:
            logger.info(
                f"  {subscription.id}: {subscription.status.value}, "
                f"endDate {subscription.endDate.isoformat()}, user {subscription.user}"
            )
        logger.info(f"Dry run: {len(overdue)} subscription(s) would be cancelled")
        return len(overdue)

    return expire_subscriptions(now)


def main():
    """Main function."""
    args = parse_args()
    now = args.now or utc_now()

    print("=" * 70)
    print("Subscription Expiry Script")
    print(f"Reference time: {now.isoformat()}")
    print("=" * 70)

    if not is_connected():
        logger.info("Connecting to MongoDB...")
        connect_to_mongodb()

    if not is_connected():
        logger.error("Failed to connect to MongoDB")
        sys.exit(1)

    try:
        count = run(now, dry_run=args.dry_run)
    finally:
        close_mongodb_connection()

    if args.dry_run:
        print(f"ℹ️  {count} subscription(s) would be cancelled")
    else:
        print(f"✅ Cancelled {count} expired subscription(s)")
    print("=" * 70)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\nScript interrupted by user.")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        sys.exit(1)
