#!/usr/bin/env python
"""Database initialization script for the map review backend.

This script creates all database tables based on the SQLAlchemy models.
Run this once before starting the application for the first time.

Usage:
    python init_db.py
"""

import os
import sys
from mapreview import create_app, db


def init_database():
    """Initialize the database by creating all tables."""

    config_name = os.getenv('FLASK_ENV', 'development')
    app = create_app(config_name)

    print(f"\n{'='*60}")
    print(f"Database Initialization for {config_name.upper()} Environment")
    print(f"{'='*60}\n")

    with app.app_context():
        try:
            print("Creating database tables...")
            print(f"Database URI: {app.config['SQLALCHEMY_DATABASE_URI']}\n")

            db.create_all()

            tables_info = [
                ("users", "Mappers and reviewers"),
                ("user_metrics", "Score ledger per user"),
                ("tasks", "Map-editing tasks"),
                ("task_bundles", "Named groups of tasks"),
                ("bundle_tasks", "Bundle membership"),
                ("tags", "Tags, unique per name and type"),
                ("item_tags", "Tags attached to tasks and challenges"),
                ("actions", "Audit trail"),
                ("comments", "Task comments"),
            ]

            print("Created tables:")
            for table_name, description in tables_info:
                print(f"  - {table_name:<25} {description}")

            print(f"\n{'='*60}")
            print("Database initialization complete!")
            print(f"{'='*60}\n")
            print("Next step: start the server with python wsgi.py\n")

            return True

        except Exception as e:
            print(f"Error creating database: {type(e).__name__}: {e}\n")
            return False


if __name__ == '__main__':
    success = init_database()
    sys.exit(0 if success else 1)
