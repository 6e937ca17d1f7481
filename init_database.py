#!/usr/bin/env python3
"""
Initialize Database for deployment
Run this once after deployment to set up tables and starter data.
Pass --reset to drop every table first.
"""
import argparse
import sys

from sqlalchemy.exc import SQLAlchemyError


def init_database(reset=False):
    """Create (or recreate) the tables and seed the default admin, rooms and tags"""
    from app import create_app
    from extensions import db
    from init_data import create_initial_data

    print("Initializing database...")

    app = create_app({'SCHEDULER_ENABLED': False, 'SEED_INITIAL_DATA': False})
    try:
        with app.app_context():
            if reset:
                db.drop_all()
                print("Dropped existing tables")

            db.create_all()
            print("Database tables created")

            create_initial_data()

            print("Database initialization complete!")
            print("Login credentials:")
            print("   Admin: admin@hotel.com / admin123")
    except SQLAlchemyError as e:
        print(f"Database initialization failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument('--reset', action='store_true', help='drop all tables before creating them')
    args = parser.parse_args()
    sys.exit(init_database(reset=args.reset))
