"""
Ownership policy for patient, doctor and mapping records.

Pure predicates over an authenticated principal and already-loaded rows. The
record services evaluate them before any mutation and turn a refusal into
NotFoundOrForbidden, the same error a missing record produces.

Patients and mappings are single-owner: only the user recorded in created_by
may see or change them. Doctors are directory data visible to everyone.
"""

from typing import Optional

from healthcare_backend.auth import UserPrincipal
from healthcare_backend.models.doctor import Doctor
from healthcare_backend.models.mapping import PatientDoctorMapping
from healthcare_backend.models.patient import Patient


def _owns(principal: UserPrincipal, record) -> bool:
    return record is not None and record.created_by == principal.id


def can_read_patient(principal: UserPrincipal, patient: Optional[Patient]) -> bool:
    return _owns(principal, patient)


def can_write_patient(principal: UserPrincipal, patient: Optional[Patient]) -> bool:
    return _owns(principal, patient)


def can_read_doctor(principal: UserPrincipal, doctor: Optional[Doctor]) -> bool:
    return doctor is not None


def can_write_doctor(principal: UserPrincipal, doctor: Optional[Doctor], restrict: bool = False) -> bool:
    """Any authenticated user may edit a doctor unless writes are restricted to the creator."""
    if doctor is None:
        return False
    if restrict:
        return _owns(principal, doctor)
    return True


def can_create_mapping(
    principal: UserPrincipal,
    patient: Optional[Patient],
    doctor: Optional[Doctor],
) -> bool:
    return _owns(principal, patient) and doctor is not None


def can_read_mapping(principal: UserPrincipal, mapping: Optional[PatientDoctorMapping]) -> bool:
    return _owns(principal, mapping)


def can_delete_mapping(principal: UserPrincipal, mapping: Optional[PatientDoctorMapping]) -> bool:
    return _owns(principal, mapping)
