"""FastAPI dependencies: DB session, current user from JWT, role gates.

The bearer token is read from the Authorization header. A missing token is
401; an invalid or expired token is 403, as the web client expects.
"""
from typing import Callable, Generator, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from telemed.db.session import SessionLocal
from telemed.core.exceptions import ApiError
from telemed.core.permissions import ensure_role
from telemed.core.security import decode_access_token
from telemed.models.enums import Role
from telemed.models.profiles import DoctorProfile, PatientProfile
from telemed.models.user import User
from telemed.services.pharmacy_service import PharmacistProfileNotFound, resolve_pharmacy_id

security = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> int:
    """Extract the user id (``sub``) from the bearer token."""
    if not credentials or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired token",
        )

    try:
        return int(payload["sub"])
    except (TypeError, ValueError):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid token")


def get_current_user(
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
) -> User:
    """Load current user from DB."""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


def require_role(*roles: Role) -> Callable[..., User]:
    """Dependency factory: the current user, provided they hold one of ``roles``."""

    def dependency(current_user: User = Depends(get_current_user)) -> User:
        ensure_role(current_user, *roles)
        return current_user

    return dependency


get_current_patient = require_role(Role.PATIENT)
get_current_doctor = require_role(Role.DOCTOR)
get_current_pharmacist = require_role(Role.PHARMACIST)
get_current_admin = require_role(Role.ADMIN)


def get_patient_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_patient),
) -> PatientProfile:
    profile = db.query(PatientProfile).filter(PatientProfile.user_id == current_user.id).first()
    if not profile:
        raise ApiError.not_found("Patient profile")
    return profile


def get_doctor_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_doctor),
) -> DoctorProfile:
    profile = db.query(DoctorProfile).filter(DoctorProfile.user_id == current_user.id).first()
    if not profile:
        raise ApiError.not_found("Doctor profile")
    return profile


def get_pharmacy_id(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_pharmacist),
) -> int:
    """The caller's pharmacy id, auto-provisioned on first access."""
    try:
        return resolve_pharmacy_id(db, current_user.id)
    except PharmacistProfileNotFound:
        raise ApiError.not_found("Pharmacist profile", reason="PHARMACIST_PROFILE_NOT_FOUND")
