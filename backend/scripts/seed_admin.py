#!/usr/bin/env python3
"""
Admin User Seed Script
Creates the first admin user, who can then create employees and missions.

Usage:
    python -m scripts.seed_admin <name> <password>

Example:
    python -m scripts.seed_admin admin securepassword123
"""
import sys
import os
from uuid import uuid4

# Add the parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.orm import Session
from mission_manager.database import SessionLocal, init_db
from mission_manager.models.db_models import Department, Role, UserDB
from mission_manager.auth import hash_password


def create_admin_user(name: str, password: str) -> bool:
    """Create an admin user in the database."""
    # Ensure tables exist
    init_db()

    db: Session = SessionLocal()
    try:
        existing = db.query(UserDB).filter(UserDB.name == name).first()

        if existing:
            if existing.role == Role.ADMIN:
                print(f"Error: User '{name}' already exists and is already an admin.")
                return False
            # Upgrade existing user to admin
            existing.role = Role.ADMIN
            db.commit()
            print(f"Upgraded existing user '{name}' to admin role.")
            return True

        admin_user = UserDB(
            id=str(uuid4()),
            name=name,
            password_hash=hash_password(password),
            role=Role.ADMIN,
            department=Department.MANAGEMENT,
        )

        db.add(admin_user)
        db.commit()

        print("Admin user created successfully!")
        print(f"  Name: {name}")
        print(f"  Id: {admin_user.id}")
        print("  Role: ADMIN")
        return True

    except Exception as e:
        print(f"Error creating admin user: {e}")
        db.rollback()
        return False
    finally:
        db.close()


def main():
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(1)

    name = sys.argv[1]
    password = sys.argv[2]

    # Basic validation
    if len(password) < 8:
        print("Error: Password must be at least 8 characters.")
        sys.exit(1)

    success = create_admin_user(name, password)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
