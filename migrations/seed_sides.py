"""
Create the capacity tables and seed the facility sides

Rows:
- Power (Power side)
- Base (Base side)

Idempotent: existing sides are left alone.
"""

# Ensure this script can be run directly from repo root
import sys
from pathlib import Path

CURRENT_DIR = Path(__file__).resolve().parent
ROOT_DIR = CURRENT_DIR.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from sqlalchemy import text

from app import models  # noqa: F401
from app.database import Base, engine

SIDES = [
    ("Power", "Power side"),
    ("Base", "Base side"),
]


def upgrade():
    Base.metadata.create_all(bind=engine, checkfirst=True)
    with engine.connect() as conn:
        for key, name in SIDES:
            conn.execute(
                text(
                    """
                    INSERT INTO sides (key, name)
                    SELECT :key, :name
                    WHERE NOT EXISTS (SELECT 1 FROM sides WHERE key = :key)
                    """
                ),
                {"key": key, "name": name},
            )
        conn.commit()
        print("Migration seed_sides applied successfully")


def downgrade():
    with engine.connect() as conn:
        for key, _ in SIDES:
            conn.execute(text("DELETE FROM sides WHERE key = :key"), {"key": key})
        conn.commit()
        print("Migration seed_sides rolled back")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Manage facility sides seed")
    parser.add_argument("--down", action="store_true", help="Rollback the migration")
    args = parser.parse_args()

    if args.down:
        downgrade()
    else:
        upgrade()
