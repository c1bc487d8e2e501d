#!/usr/bin/env python3
import os
import sys

# Add the parent directory to sys.path to allow imports from the backend
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from db import SessionLocal
from schema import Order, CartItem, ProductStock, Team, League, Profile
from scripts.seed_catalog import seed
from utils import clear_database

STORE_TABLES = (Order, CartItem, ProductStock, Team, League, Profile)


def row_counts(db) -> dict:
    return {model.__tablename__: db.query(model).count() for model in STORE_TABLES}


def reset(reseed: bool = False):
    """
    Wipes the store and optionally loads the demo catalog again.

    Returns:
        (rows removed per table, number of demo teams seeded)
    """
    db = SessionLocal()
    try:
        removed = row_counts(db)
    finally:
        db.close()

    clear_database()

    seeded = 0
    if reseed:
        db = SessionLocal()
        try:
            seeded = seed(db)
        finally:
            db.close()
    return removed, seeded


def main(argv=None) -> int:
    """
    CLI utility for wiping the storefront database.

    Flags:
        --yes   Skip the confirmation prompt.
        --seed  Load the demo leagues, teams and stock after the wipe.
    """
    args = sys.argv[1:] if argv is None else argv
    reseed = "--seed" in args

    if "--yes" not in args:
        print("WARNING: This will permanently delete the catalog, carts, customers and orders.")
        confirm = input("Reset the storefront database? (y/N): ")
        if confirm.lower() != 'y':
            print("Reset cancelled.")
            return 1

    try:
        removed, seeded = reset(reseed)
    except Exception as e:
        print(f"Error resetting database: {e}")
        return 1

    for table, count in removed.items():
        if count:
            print(f"  {table}: {count} rows removed")
    print("Database reset successfully.")
    if reseed:
        print(f"Seeded {seeded} demo teams.")
    return 0

if __name__ == "__main__":
    sys.exit(main())
