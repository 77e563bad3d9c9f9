#!/usr/bin/env python3
"""Create (or reset) a super admin account in the configured MongoDB database."""

import argparse
import getpass
import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from rxadmin.auth import hash_password  # noqa: E402
from rxadmin.config import settings  # noqa: E402
from rxadmin.data import users as users_repo  # noqa: E402
from rxadmin.db import ensure_indexes  # noqa: E402
from rxadmin.models.domain import SUPER_ADMIN  # noqa: E402


def seed_super_admin(email: str, password: str, name: str, reset: bool = False) -> tuple[dict, bool]:
    """Insert a super admin, or reset an existing account's password and role.

    Returns the stored user (without password) and whether it was created.
    """
    existing = users_repo.find_by_email(email)
    if existing is None:
        user = users_repo.create_user(
            {
                "email": email,
                "password": hash_password(password),
                "name": name,
                "role": SUPER_ADMIN,
                "status": "active",
            }
        )
        return user, True
    if not reset:
        raise ValueError(f"User {email} already exists (use --reset to overwrite)")
    user = users_repo.update_user(
        existing["_id"],
        {"password": hash_password(password), "role": SUPER_ADMIN, "status": "active", "district_id": None},
    )
    return user, False


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", default="Super Admin")
    parser.add_argument("--password", help="Prompted for when omitted")
    parser.add_argument("--reset", action="store_true", help="Reset the password of an existing account")
    args = parser.parse_args(argv)

    print("=" * 60)
    print("Super Admin Setup")
    print("=" * 60)
    print(f"Database: {settings.mongodb_db_name} @ {settings.mongodb_uri.split('@')[-1]}")
    print()

    password = args.password or getpass.getpass("Password: ")
    if len(password) < 8:
        print("❌ Password must be at least 8 characters")
        return 1

    try:
        ensure_indexes()
        user, created = seed_super_admin(args.email, password, args.name, reset=args.reset)
    except ValueError as e:
        print(f"❌ {e}")
        return 1
    except Exception as e:
        print(f"❌ Error talking to MongoDB: {e}")
        print()
        print("Make sure RXADMIN_MONGODB_URI points at a reachable server")
        return 1

    action = "Created" if created else "Reset"
    print(f"✅ {action} super admin {user['email']} ({user['_id']})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
