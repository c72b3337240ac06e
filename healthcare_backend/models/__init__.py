from healthcare_backend.models.user import User
from healthcare_backend.models.patient import Patient
from healthcare_backend.models.doctor import Doctor
from healthcare_backend.models.mapping import PatientDoctorMapping

__all__ = ["User", "Patient", "Doctor", "PatientDoctorMapping"]
