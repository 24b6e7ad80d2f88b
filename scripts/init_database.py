"""
CLI helper to create the catalog tables and seed the admin account, store
settings and sample products.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from storefront.config import get_settings
from storefront.db import SqlStoreClient
from storefront.seed import seed_defaults

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Initialise the storefront database")
    parser.add_argument(
        "-d",
        "--database-url",
        type=str,
        default=None,
        help="SQLAlchemy URL (defaults to DATABASE_URL)",
    )
    parser.add_argument(
        "--no-sample-products",
        action="store_true",
        help="Seed only the admin account and settings",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")

    settings = get_settings()
    database_url = args.database_url or settings.database_url
    if not database_url:
        logger.error("No database URL given and DATABASE_URL is not set")
        return 2

    store = SqlStoreClient(database_url)
    seeded = seed_defaults(store, settings, with_products=not args.no_sample_products)
    if seeded:
        logger.info("Admin user: %s", settings.admin_username)
        logger.warning("Change the seeded admin password after the first login")
    logger.info(
        "Database ready: %d users, %d products",
        store.count_users(),
        len(store.list_products()),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
