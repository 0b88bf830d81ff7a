"""Auth: register, login, current user and profile.

SECURITY FEATURES:
- Password hashing with bcrypt
- Password policy (length, digits) enforced on the request schema
- Role always read from the stored users.role column
- ADMIN cannot be self-registered; the account is provisioned at startup
- Generic login failure message to prevent user enumeration
"""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from telemed.api.deps import get_db, get_current_user
from telemed.core.audit import AuditLog
from telemed.core.exceptions import ApiError
from telemed.core.security import verify_password, get_password_hash, create_access_token
from telemed.models.enums import Role
from telemed.models.profiles import DoctorProfile, PatientProfile, PharmacistProfile
from telemed.models.user import User
from telemed.schemas.user import ProfileUpdate, Token, UserCreate, UserLogin, UserResponse
from telemed.services.pharmacy_service import provision_pharmacy

router = APIRouter()

USER_FIELDS = ("first_name", "last_name", "phone")
PATIENT_FIELDS = ("dob", "gender", "address", "blood_group", "emergency_contact")
DOCTOR_FIELDS = ("specialization", "qualifications", "experience_years")


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(data: UserCreate, request: Request, db: Session = Depends(get_db)):
    """
    Create the user and the profile matching its role in one transaction.

    PHARMACIST registrations also get their default pharmacy right away.
    """
    ip = _client_ip(request)
    if data.role == Role.ADMIN:
        AuditLog.log_authentication("register", data.email, ip, False, reason="admin self-registration")
        raise ApiError.bad_request("Cannot register as ADMIN")

    if db.query(User).filter(User.email == data.email).first():
        AuditLog.log_authentication("register", data.email, ip, False, reason="duplicate email")
        raise ApiError.bad_request("Email already registered")

    try:
        user = User(
            email=data.email,
            hashed_password=get_password_hash(data.password),
            role=data.role.value,
            first_name=data.first_name,
            last_name=data.last_name,
            phone=data.phone,
        )
        db.add(user)
        db.flush()

        if data.role == Role.PATIENT:
            db.add(PatientProfile(user_id=user.id))
        elif data.role == Role.DOCTOR:
            db.add(DoctorProfile(
                user_id=user.id,
                specialization=data.specialization,
                qualifications=data.qualifications,
                experience_years=data.experience_years or 0,
            ))
        elif data.role == Role.PHARMACIST:
            db.add(PharmacistProfile(user_id=user.id))
            db.flush()
            provision_pharmacy(db, user.id)

        db.commit()
    except IntegrityError:
        db.rollback()
        raise ApiError.bad_request("Email already registered")

    db.refresh(user)
    AuditLog.log_authentication("register", user.email, ip, True)
    return user


@router.post("/login", response_model=Token)
def login(data: UserLogin, request: Request, db: Session = Depends(get_db)):
    """Generic error: don't specify which field is wrong."""
    ip = _client_ip(request)
    user = db.query(User).filter(User.email == data.email).first()
    if not user or not verify_password(data.password, user.hashed_password):
        AuditLog.log_authentication("failed_login", data.email, ip, False, reason="invalid credentials")
        raise ApiError.unauthorized(f"failed login for {data.email}")

    token = create_access_token(subject=str(user.id), role=user.role)
    AuditLog.log_authentication("login", user.email, ip, True)
    return Token(access_token=token, role=user.role)


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    """Get current authenticated user."""
    return current_user


def _profile_payload(user: User) -> dict:
    payload = UserResponse.model_validate(user).model_dump(by_alias=True)
    profile = None
    if user.role == Role.PATIENT.value and user.patient_profile is not None:
        p = user.patient_profile
        profile = {
            "id": p.id,
            "dob": p.dob,
            "gender": p.gender,
            "address": p.address,
            "bloodGroup": p.blood_group,
            "emergencyContact": p.emergency_contact,
        }
    elif user.role == Role.DOCTOR.value and user.doctor_profile is not None:
        p = user.doctor_profile
        profile = {
            "id": p.id,
            "specialization": p.specialization,
            "qualifications": p.qualifications,
            "experienceYears": p.experience_years,
            "isAvailable": p.is_available,
        }
    elif user.role == Role.PHARMACIST.value and user.pharmacist_profile is not None:
        p = user.pharmacist_profile
        profile = {"id": p.id, "pharmacyId": p.pharmacy_id}
    payload["profile"] = profile
    return payload


@router.get("/profile")
def get_profile(current_user: User = Depends(get_current_user)):
    return _profile_payload(current_user)


@router.put("/profile")
def update_profile(data: ProfileUpdate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Update name/phone, plus the role profile fields that apply to the caller."""
    changes = data.model_dump(exclude_unset=True)

    for field in USER_FIELDS:
        if field in changes:
            setattr(current_user, field, changes[field])

    if current_user.role == Role.PATIENT.value:
        profile = current_user.patient_profile
        if profile is None:
            profile = PatientProfile(user_id=current_user.id)
            db.add(profile)
        for field in PATIENT_FIELDS:
            if field in changes:
                setattr(profile, field, changes[field])
    elif current_user.role == Role.DOCTOR.value:
        profile = current_user.doctor_profile
        if profile is None:
            profile = DoctorProfile(user_id=current_user.id)
            db.add(profile)
        for field in DOCTOR_FIELDS:
            if field in changes and changes[field] is not None:
                setattr(profile, field, changes[field])

    db.commit()
    db.refresh(current_user)
    AuditLog.log_action("update", "profile", current_user.id, current_user, changes=changes)
    return _profile_payload(current_user)
