from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import date, datetime
from typing import Literal, Optional

PHONE_PATTERN = r"^\+?[0-9][0-9 ()\-]{6,19}$"


class PatientBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    date_of_birth: Optional[date] = None
    gender: Optional[Literal["male", "female", "other"]] = None
    address: Optional[str] = Field(default=None, max_length=500)
    medical_history: Optional[str] = Field(default=None, max_length=2000)

    class Config:
        str_strip_whitespace = True

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.lower() if v else v


class PatientCreate(PatientBase):
    pass


class PatientUpdate(PatientBase):
    """PUT replaces every field; omitted optional fields are cleared."""


class PatientResponse(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    medical_history: Optional[str] = None
    created_by: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
