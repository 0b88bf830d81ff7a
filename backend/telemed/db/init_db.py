"""Create all tables and provision the admin account. Run on app startup.

ADMIN is never granted through /auth/register: the only admin account is the
one provisioned here from ADMIN_EMAIL / ADMIN_PASSWORD. Without a configured
password a random one is generated and printed once.
"""
import secrets

from sqlalchemy.orm import Session

from telemed.core.config import settings
from telemed.core.security import get_password_hash
from telemed.db.base import Base
from telemed.db.session import engine, SessionLocal
from telemed import models  # noqa: F401 - register models
from telemed.models.enums import Role
from telemed.models.user import User


def provision_admin(db: Session, email: str, password: str = "") -> tuple[User, str | None]:
    """
    Create the admin user if it does not exist.

    Returns (user, generated_password). generated_password is None when the
    account already existed or the password came from configuration.
    """
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        if existing.role != Role.ADMIN.value:
            existing.role = Role.ADMIN.value
            db.commit()
        return existing, None

    generated = None
    if not password:
        generated = secrets.token_urlsafe(16)
        password = generated

    admin = User(
        email=email,
        hashed_password=get_password_hash(password),
        role=Role.ADMIN.value,
        first_name="System",
        last_name="Admin",
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    return admin, generated


def init_db():
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        _, generated = provision_admin(db, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)
        if generated:
            print("\n" + "=" * 70)
            print("ADMIN USER CREATED")
            print("=" * 70)
            print(f"Email:    {settings.ADMIN_EMAIL}")
            print(f"Password: {generated}")
            print("\nSet ADMIN_PASSWORD in .env to control this password.")
            print("=" * 70 + "\n")
    finally:
        db.close()
