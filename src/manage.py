"""FreshDrop database management CLI.

Creates and drops the laundry schema on the SQL providers selected by
PROTEAN_ENV (``sqlite`` or ``production``).

Usage:
    PROTEAN_ENV=sqlite python src/manage.py setup-db   # Create all tables
    PROTEAN_ENV=sqlite python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys


def setup_database():
    from laundry.domain import laundry
    from laundry.utils.db import setup_db

    print("Initializing laundry domain...")
    laundry.init()
    print("Creating laundry database schema...")
    touched = setup_db(laundry)
    if not touched:
        print("  No SQL provider configured; nothing to create.")
    else:
        print(f"  Schema ready on: {', '.join(touched)}")

    print("Done.")


def drop_database():
    from laundry.domain import laundry
    from laundry.utils.db import drop_db

    print("Initializing laundry domain...")
    laundry.init()
    print("Dropping laundry database schema...")
    touched = drop_db(laundry)
    if not touched:
        print("  No SQL provider configured; nothing to drop.")
    else:
        print(f"  Schema dropped on: {', '.join(touched)}")

    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="FreshDrop database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
