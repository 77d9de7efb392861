"""
Command Line Interface
======================

Usage:
    python -m reportflow.cli init-db
    python -m reportflow.cli create-admin --email admin@example.com --password 'S3cure-pass' --name Admin
"""

import argparse
import sys
from typing import Optional, Sequence

from reportflow.core.config import settings
from reportflow.core.logging import configure_logging, get_logger
from reportflow.db.init_db import create_admin, init_database
from reportflow.db.session import SessionLocal

# Initialize logger
logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="reportflow",
        description=f"{settings.APP_NAME} management commands",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create tables and seed default data")

    admin_parser = subparsers.add_parser("create-admin", help="Create or promote an admin user")
    admin_parser.add_argument("--email", required=True, help="Admin email address")
    admin_parser.add_argument("--password", required=True, help="Admin password (min 8 characters)")
    admin_parser.add_argument("--name", default=None, help="Display name")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)

    db = SessionLocal()
    try:
        if args.command == "init-db":
            init_database(db)
            print(f"Database initialised ({settings.DATABASE_PROVIDER})")
        elif args.command == "create-admin":
            if len(args.password) < 8:
                print("Password must be at least 8 characters", file=sys.stderr)
                return 2
            init_database(db)
            user = create_admin(db, args.email, args.password, args.name)
            print(f"Admin ready: {user.email} ({user.id})")
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
