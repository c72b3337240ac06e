from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from healthcare_backend.database import Base


class PatientDoctorMapping(Base):
    __tablename__ = "patient_doctor_mappings"
    __table_args__ = (
        UniqueConstraint("patient_id", "doctor_id", name="uq_mapping_patient_doctor"),
    )

    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id", ondelete="CASCADE"), nullable=False, index=True)
    doctor_id = Column(Integer, ForeignKey("doctors.id", ondelete="CASCADE"), nullable=False, index=True)
    assigned_date = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    notes = Column(Text)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
