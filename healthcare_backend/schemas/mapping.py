from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

from healthcare_backend.schemas import MAX_ID
from healthcare_backend.schemas.doctor import DoctorResponse


class MappingCreate(BaseModel):
    patient_id: int = Field(..., ge=1, le=MAX_ID)
    doctor_id: int = Field(..., ge=1, le=MAX_ID)
    notes: Optional[str] = Field(default=None, max_length=1000)

    class Config:
        str_strip_whitespace = True


class MappingResponse(BaseModel):
    id: int
    patient_id: int
    doctor_id: int
    assigned_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_by: int
    patient_name: str
    doctor_name: str
    specialization: str

    class Config:
        from_attributes = True


class AssignedDoctorResponse(DoctorResponse):
    """A doctor row annotated with the mapping that links it to a patient."""
    mapping_id: int
    assigned_date: Optional[datetime] = None
    notes: Optional[str] = None
