from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from telemed.core.config import settings
from telemed.models.enums import Role
from telemed.schemas.base import CamelModel


class UserCreate(CamelModel):
    email: EmailStr
    password: str
    role: Role = Role.PATIENT
    first_name: Optional[str] = Field(None, max_length=128)
    last_name: Optional[str] = Field(None, max_length=128)
    phone: Optional[str] = Field(None, max_length=64)
    # DOCTOR only
    specialization: Optional[str] = None
    qualifications: Optional[str] = None
    experience_years: Optional[int] = Field(None, ge=0)

    @field_validator('password')
    @classmethod
    def password_policy(cls, v: str) -> str:
        if len(v) < settings.MIN_PASSWORD_LENGTH:
            raise ValueError(f'Password must be at least {settings.MIN_PASSWORD_LENGTH} characters')
        if settings.REQUIRE_NUMBERS and not any(c.isdigit() for c in v):
            raise ValueError('Password must contain at least one number')
        return v


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserResponse(CamelModel):
    id: int
    email: str
    role: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: str


class ProfileUpdate(CamelModel):
    first_name: Optional[str] = Field(None, max_length=128)
    last_name: Optional[str] = Field(None, max_length=128)
    phone: Optional[str] = Field(None, max_length=64)
    # PATIENT profile
    dob: Optional[date] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    blood_group: Optional[str] = Field(None, max_length=8)
    emergency_contact: Optional[str] = None
    # DOCTOR profile
    specialization: Optional[str] = None
    qualifications: Optional[str] = None
    experience_years: Optional[int] = Field(None, ge=0)
