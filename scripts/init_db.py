#!/usr/bin/env python3
"""
Database initialization script.

Creates the marketplace database and optionally stores the Gemini API key.
"""

import argparse
import getpass
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from timber_market.config import get_config_manager
from timber_market.database import MarketplaceRepository, create_database_manager
from timber_market.utils import get_logger


def main() -> None:
    """Initialize the database."""
    parser = argparse.ArgumentParser(description="Initialize the timber marketplace database")
    parser.add_argument(
        '--set-api-key',
        action='store_true',
        help='Prompt for a Gemini API key and store it encrypted'
    )
    args = parser.parse_args()

    logger = get_logger("init_db")

    logger.info("=" * 60)
    logger.info("Timber Market Database Initialization")
    logger.info("=" * 60)

    config = get_config_manager()
    db_path = config.get("database.path", "data/timber_market.db")

    if args.set_api_key:
        api_key = getpass.getpass("Enter Gemini API key: ").strip()
        if not api_key:
            logger.error("No API key entered!")
            sys.exit(1)
        config.set_gemini_api_key(api_key)
        logger.info("Gemini API key stored securely")

    logger.info(f"Creating database at: {db_path}")
    db_manager = create_database_manager(db_path)

    try:
        db_manager.initialize_database()

        logger.info("Verifying database tables:")
        for table in ("kv_store", "audit_log"):
            if db_manager.table_exists(table):
                logger.info(f"  ✓ {table}")
            else:
                logger.warning(f"  ✗ {table} - NOT FOUND")

        repository = MarketplaceRepository(db_manager)
        logger.info(
            f"Stored: {len(repository.load_demands())} demands, "
            f"{len(repository.load_stock())} stock items, "
            f"{len(repository.load_companies())} companies"
        )

        logger.info("=" * 60)
        logger.info("Database initialization complete!")
        logger.info("=" * 60)

    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
