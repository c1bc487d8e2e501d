#!/usr/bin/env python3
import os
import sys
from datetime import datetime, timezone
from decimal import Decimal

# Add the parent directory to sys.path to allow imports from the backend
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from db import SessionLocal, init_db
from schema import League, Team, ProductStock
from config import config

DEMO_CATALOG = {
    "Brasileirão": [
        ("Flamengo 24/25", "249.90"),
        ("Palmeiras 24/25", "249.90"),
        ("Corinthians 24/25", "229.90"),
        ("São Paulo 24/25", "229.90"),
    ],
    "Premier League": [
        ("Arsenal 24/25", "299.90"),
        ("Liverpool 24/25", "299.90"),
        ("Manchester City 24/25", "319.90"),
    ],
    "La Liga": [
        ("Real Madrid 24/25", "329.90"),
        ("Barcelona 24/25", "329.90"),
    ],
    "Seleções": [
        ("Brasil Home 2024", "349.90"),
        ("Argentina Home 2024", "349.90"),
    ],
}

# Stock per size, cycled through the catalog so the demo shows every stock status
STOCK_PATTERN = [(20, 12, 0, 8, 3), (4, 15, 15, 10, 0), (0, 0, 6, 2, 1)]


def seed(db) -> int:
    """
    Inserts the demo leagues, teams and per-size stock if the catalog is empty.

    Returns:
        The number of teams created.
    """
    if db.query(Team).count():
        return 0

    now = datetime.now(timezone.utc)
    created = 0
    for league_name, teams in DEMO_CATALOG.items():
        league = League(name=league_name, created_at=now)
        db.add(league)
        db.flush()
        for name, price in teams:
            slug = name.lower().replace(" ", "-").replace("/", "-")
            team = Team(
                name=name,
                league_id=league.id,
                image1=f"/images/{slug}-front.jpg",
                image2=f"/images/{slug}-back.jpg",
                price=Decimal(price),
                created_at=now,
            )
            db.add(team)
            db.flush()
            pattern = STOCK_PATTERN[created % len(STOCK_PATTERN)]
            for size, qty in zip(config.SIZES, pattern):
                db.add(ProductStock(
                    team_id=team.id, size=size, stock_quantity=qty,
                    created_at=now, updated_at=now,
                ))
            created += 1
    db.commit()
    return created


def main():
    init_db()
    db = SessionLocal()
    try:
        created = seed(db)
        if created:
            print(f"Seeded {created} teams.")
        else:
            print("Catalog already populated, nothing to do.")
    except Exception as e:
        db.rollback()
        print(f"Error seeding catalog: {e}")
    finally:
        db.close()

if __name__ == "__main__":
    main()
