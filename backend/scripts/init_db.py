"""Create (or recreate) the platform tables, including notifications and reminder_log."""
import argparse
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.database import engine, Base
import app.models  # noqa: F401 - registers all models


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create internship platform tables.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop every table before creating (development only)",
    )
    return parser.parse_args()


def init_db(reset: bool = False):
    if reset:
        print(f"Dropping tables on {engine.url.render_as_string(hide_password=True)} ...")
        Base.metadata.drop_all(bind=engine)
    print("Creating tables: " + ", ".join(sorted(Base.metadata.tables)))
    Base.metadata.create_all(bind=engine)
    print("Database initialized successfully.")


if __name__ == "__main__":
    init_db(reset=parse_args().reset)
