"""Grant back-office access to an account (creating it if needed)."""

from __future__ import annotations

import getpass

from apkstore.auth import provision_admin
from apkstore.db import SessionLocal, init_db
from apkstore.validation import is_acceptable_password


def main() -> None:
    init_db()
    db = SessionLocal()
    try:
        email = input("Admin email: ").strip()
        if not email:
            raise ValueError("email is required")

        username = input("Username [admin]: ").strip() or "admin"

        password = getpass.getpass("Password: ").strip()
        if not is_acceptable_password(password):
            raise ValueError("password needs at least 6 characters with a letter and a number")

        profile = provision_admin(db, email, password, username)
        print(f"'{profile.email}' is now an admin.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
