#!/usr/bin/env python3
"""
Initialize the annotation page database.

Creates all necessary tables for storing annotation pages, annotations
and their image targets.
"""
import argparse
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent))

from config.log_config import configure_logging
from data.database import DatabaseManager


def main():
    parser = argparse.ArgumentParser(
        description='Initialize annotation page database'
    )
    parser.add_argument(
        '--database-url',
        type=str,
        default=None,
        help='Database URL (default: DATABASE_URL setting)'
    )
    parser.add_argument(
        '--drop-existing',
        action='store_true',
        help='Drop existing tables before creating new ones (WARNING: destroys data!)'
    )

    args = parser.parse_args()
    configure_logging()

    # Create database manager
    db_manager = DatabaseManager(args.database_url)

    print("=" * 60)
    print("Annotation Page Database Initialization")
    print("=" * 60)
    print(f"Database URL: {db_manager.database_url}")
    print()

    # Drop tables if requested
    if args.drop_existing:
        confirm = input("⚠️  Drop existing tables? This will DELETE ALL DATA! (yes/no): ")
        if confirm.lower() == 'yes':
            db_manager.drop_tables()
            print()
        else:
            print("Aborted.")
            return

    # Create tables
    db_manager.create_tables()

    print()
    print("✓ Database initialized successfully!")
    print()
    print("Tables created:")
    print("  - anno_pages")
    print("  - annotations")
    print("  - annotation_targets")
    print()
    print("You can now:")
    print("  1. Import pages: python cli_search.py load pages.json")
    print("  2. Start the API server: uvicorn serving.search_api:app --port 8002")
    print()


if __name__ == '__main__':
    main()
