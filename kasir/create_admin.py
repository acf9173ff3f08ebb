"""One-time script to create an admin user.

Usage:
    python -m kasir.create_admin
"""

from __future__ import annotations

import getpass

from sqlalchemy import func

from kasir.app.core.database import SessionLocal
from kasir.app.core.security import get_password_hash

# Import all models so SQLAlchemy resolves relationships
import kasir.app.models  # noqa: F401

from kasir.app.models.user import RoleEnum, User

MIN_PASSWORD_LENGTH = 8


def main() -> None:
    username = input("Username [admin]: ").strip() or "admin"
    full_name = input("Full name [Administrator]: ").strip() or "Administrator"
    password = getpass.getpass("Password: ")
    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"Error: password must be at least {MIN_PASSWORD_LENGTH} characters.")
        return

    db = SessionLocal()
    try:
        existing = db.query(User).filter(
            func.lower(User.username) == username.lower()
        ).first()
        if existing:
            # Reset password, activate and promote
            existing.hashed_password = get_password_hash(password)
            existing.is_active = True
            existing.role = RoleEnum.ADMIN
            db.commit()
            print("Admin user already exists, password reset!")
            print(f"  ID:       {existing.id}")
            print(f"  Username: {username}")
            print("  Role:     ADMIN")
            return

        user = User(
            username=username,
            full_name=full_name,
            hashed_password=get_password_hash(password),
            role=RoleEnum.ADMIN,
        )
        db.add(user)
        db.commit()
        db.refresh(user)

        print("Admin user created successfully!")
        print(f"  ID:       {user.id}")
        print(f"  Username: {username}")
        print(f"  Name:     {full_name}")
        print("  Role:     ADMIN")
    finally:
        db.close()


if __name__ == "__main__":
    main()
