"""
Create an employee or manager account. Run from the project root with .env loaded.

Usage:
  python scripts/create_user.py alice@example.com "Alice Kouassi" secret123
  python scripts/create_user.py bob@example.com "Bob Yao" secret123 --role MANAGER
"""
import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from pointage.core.security import validate_password
from pointage.db.session import SessionLocal
from pointage.models.user import Role
from pointage.services.user_service import create_user, get_user_by_email


def main():
    parser = argparse.ArgumentParser(description="Create a pointage user")
    parser.add_argument("email")
    parser.add_argument("name")
    parser.add_argument("password")
    parser.add_argument("--role", choices=[r.value for r in Role], default=Role.EMPLOYEE.value)
    args = parser.parse_args()

    try:
        password = validate_password(args.password)
    except ValueError as e:
        parser.error(str(e))

    db = SessionLocal()
    try:
        existing = get_user_by_email(db, args.email)
        if existing:
            print(f"User already exists: {existing.email} (id={existing.id}, role={existing.role})")
            return
        user = create_user(db, args.email, args.name, password, role=Role(args.role))
        print(f"Created user {user.email} (id={user.id}, role={user.role})")
    finally:
        db.close()


if __name__ == "__main__":
    main()
