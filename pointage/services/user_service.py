"""
User service: identity lookups and the manager authorization check.
"""
from typing import Optional

from sqlalchemy.orm import Session

from pointage.core.config import settings
from pointage.core.security import hash_password
from pointage.models.user import Role, User


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def is_company_email(email: str) -> bool:
    """True when no company domain is configured or the address belongs to it."""
    domain = settings.COMPANY_EMAIL_DOMAIN
    if not domain:
        return True
    return email.strip().lower().endswith(f"@{domain}")


def role_of(db: Session, user_id: int) -> Role:
    """
    Role of a user for authorization decisions.

    Unknown or inactive users get EMPLOYEE, i.e. no manager privileges.
    """
    user = db.query(User).filter(User.id == user_id).first()
    if user is None or not user.active:
        return Role.EMPLOYEE
    try:
        return Role(user.role)
    except ValueError:
        return Role.EMPLOYEE


def create_user(
    db: Session,
    email: str,
    name: str,
    password: str,
    role: Role = Role.EMPLOYEE,
    picture: Optional[str] = None,
) -> User:
    """Create an active user with a hashed password."""
    user = User(
        email=email.strip().lower(),
        name=name,
        role=role.value,
        password_hash=hash_password(password),
        picture=picture,
        active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
