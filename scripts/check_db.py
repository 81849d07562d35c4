"""
Database Health Check Script
Verifies that the card tables exist and that stored cards respect the scheduler's bounds
"""

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app
from models import db
from models.card import CardRecord
from models.user import User
from sqlalchemy import inspect


def check_database():
    """Check if database is working correctly"""
    app = create_app('development')

    with app.app_context():
        try:
            print("=" * 60)
            print("DATABASE HEALTH CHECK")
            print("=" * 60)

            # Check if tables exist
            inspector = inspect(db.engine)
            tables = inspector.get_table_names()

            expected_tables = ['users', 'cards']

            missing_tables = set(expected_tables) - set(tables)
            if missing_tables:
                print(f"\n❌ MISSING TABLES: {missing_tables}")
                return False

            print(f"\n✅ All {len(expected_tables)} expected tables exist")

            # Check record counts
            print("\n📊 Record Counts:")
            counts = {
                'Users': User.query.count(),
                'Cards': CardRecord.query.count(),
                'Learning': CardRecord.query.filter_by(state=0).count(),
                'Review': CardRecord.query.filter_by(state=1).count(),
                'Relearning': CardRecord.query.filter_by(state=2).count(),
            }

            for name, count in counts.items():
                print(f"  - {name}: {count}")

            # Answered cards must have stability >= 0.1 and difficulty in [0.1, 1.0]
            out_of_range = CardRecord.query.filter(
                CardRecord.reps > 0,
                db.or_(
                    CardRecord.stability < 0.1,
                    CardRecord.difficulty < 0.1,
                    CardRecord.difficulty > 1.0
                )
            ).count()

            if out_of_range:
                print(f"\n⚠️  WARNING: {out_of_range} answered card(s) with stability/difficulty out of range")

            print("\n" + "=" * 60)
            print("✅ DATABASE IS HEALTHY!")
            print("=" * 60)
            return True

        except Exception as e:
            print("\n" + "=" * 60)
            print(f"❌ DATABASE ERROR: {e}")
            print("=" * 60)
            return False


if __name__ == '__main__':
    check_database()
