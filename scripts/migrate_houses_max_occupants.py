"""
Backfill houses.max_occupants from room_type (single=1, double=2, dorm=4; missing type = single)
and re-sync is_available. Adds the occupancy columns first if the table predates them.
For a NEW database: not needed; app.models.house.House already defines them.
Run once on an EXISTING DB: python scripts/migrate_houses_max_occupants.py (from project root)
"""
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from sqlalchemy import text, inspect
from app.database import engine, SessionLocal
from app.models.house import House

COLUMNS = [
    ("room_type", "VARCHAR(20) DEFAULT 'single'"),
    ("max_occupants", "INTEGER"),
    ("current_occupants", "INTEGER NOT NULL DEFAULT 0"),
    ("is_available", "BOOLEAN NOT NULL DEFAULT TRUE"),
]


def main():
    insp = inspect(engine)
    existing = {c["name"] for c in insp.get_columns("houses")}
    for name, ddl in COLUMNS:
        if name in existing:
            print(f"  skip (exists): houses.{name}")
            continue
        with engine.begin() as conn:
            conn.execute(text(f"ALTER TABLE houses ADD COLUMN {name} {ddl}"))
        print(f"  added: houses.{name}")

    db = SessionLocal()
    try:
        houses = db.query(House).filter(House.max_occupants.is_(None)).all()
        print(f"Found {len(houses)} house(s) without max_occupants")
        for house in houses:
            house.resolve_max_occupants()
            house.sync_availability()
            print(f"  updated house {house.id}: room_type={house.room_type}, max_occupants={house.max_occupants}")
        db.commit()
    finally:
        db.close()
    print("Done.")


if __name__ == "__main__":
    main()
