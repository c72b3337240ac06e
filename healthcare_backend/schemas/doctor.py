from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional

from healthcare_backend.schemas.patient import PHONE_PATTERN


class DoctorBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    specialization: str = Field(..., min_length=2, max_length=100)
    license_number: str = Field(..., min_length=5, max_length=50)
    years_of_experience: int = Field(default=0, ge=0, le=70)

    class Config:
        str_strip_whitespace = True

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower() if v else v

    @field_validator("years_of_experience", mode="before")
    @classmethod
    def default_experience(cls, v):
        return 0 if v is None else v


class DoctorCreate(DoctorBase):
    pass


class DoctorUpdate(DoctorBase):
    """PUT replaces every field."""


class DoctorResponse(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    specialization: str
    license_number: str
    years_of_experience: int = 0
    created_by: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
