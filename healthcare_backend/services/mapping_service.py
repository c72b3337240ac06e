from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from healthcare_backend.auth import UserPrincipal
from healthcare_backend.exceptions import Conflict, NotFoundOrForbidden
from healthcare_backend.models.doctor import Doctor
from healthcare_backend.models.mapping import PatientDoctorMapping
from healthcare_backend.models.patient import Patient
from healthcare_backend.policy import (
    can_create_mapping,
    can_delete_mapping,
    can_read_mapping,
    can_read_patient,
    can_write_patient,
)
from healthcare_backend.schemas.mapping import AssignedDoctorResponse, MappingCreate, MappingResponse

logger = structlog.get_logger(__name__)


def _already_assigned() -> Conflict:
    return Conflict("Mapping already exists", "This doctor is already assigned to this patient")


def _mapping_query():
    """Mappings joined with the patient and doctor names they link."""
    return (
        select(
            *PatientDoctorMapping.__table__.columns,
            Patient.name.label("patient_name"),
            Doctor.name.label("doctor_name"),
            Doctor.specialization,
        )
        .join(Patient, PatientDoctorMapping.patient_id == Patient.id)
        .join(Doctor, PatientDoctorMapping.doctor_id == Doctor.id)
    )


class MappingService:
    async def _find_existing(self, patient_id: int, doctor_id: int, db: AsyncSession) -> Optional[int]:
        return await db.scalar(
            select(PatientDoctorMapping.id).where(
                PatientDoctorMapping.patient_id == patient_id,
                PatientDoctorMapping.doctor_id == doctor_id,
            )
        )

    async def _load_joined(self, mapping_id: int, db: AsyncSession) -> MappingResponse:
        result = await db.execute(_mapping_query().where(PatientDoctorMapping.id == mapping_id))
        return MappingResponse.model_validate(dict(result.one()._mapping))

    async def create(self, principal: UserPrincipal, data: MappingCreate, db: AsyncSession) -> MappingResponse:
        patient = await db.scalar(select(Patient).where(Patient.id == data.patient_id))
        doctor = await db.scalar(select(Doctor).where(Doctor.id == data.doctor_id))

        if not can_create_mapping(principal, patient, doctor):
            if not can_write_patient(principal, patient):
                raise NotFoundOrForbidden(
                    "Patient not found",
                    "Patient does not exist or you do not have permission to assign doctors",
                )
            raise NotFoundOrForbidden("Doctor not found", "Doctor does not exist")

        if await self._find_existing(patient.id, doctor.id, db) is not None:
            raise _already_assigned()

        mapping = PatientDoctorMapping(
            patient_id=patient.id,
            doctor_id=doctor.id,
            notes=data.notes,
            created_by=principal.id,
        )
        db.add(mapping)
        try:
            await db.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent insert of the same pair. The failed
            # flush left the session unusable, so log from the request data.
            logger.info(
                "mapping_conflict",
                patient_id=data.patient_id,
                doctor_id=data.doctor_id,
                reason=str(e.orig),
            )
            raise _already_assigned()

        logger.info(
            "mapping_created",
            mapping_id=mapping.id,
            patient_id=patient.id,
            doctor_id=doctor.id,
            user_id=principal.id,
        )
        return await self._load_joined(mapping.id, db)

    async def list_owned(self, principal: UserPrincipal, db: AsyncSession) -> list[MappingResponse]:
        result = await db.execute(
            _mapping_query()
            .where(PatientDoctorMapping.created_by == principal.id)
            .order_by(PatientDoctorMapping.assigned_date.desc(), PatientDoctorMapping.id.desc())
        )
        return [MappingResponse.model_validate(dict(row._mapping)) for row in result]

    async def get_by_id(self, principal: UserPrincipal, mapping_id: int, db: AsyncSession) -> MappingResponse:
        mapping = await db.scalar(select(PatientDoctorMapping).where(PatientDoctorMapping.id == mapping_id))
        if not can_read_mapping(principal, mapping):
            raise NotFoundOrForbidden(
                "Mapping not found",
                "Mapping does not exist or you do not have permission to view it",
            )
        return await self._load_joined(mapping.id, db)

    async def list_doctors_for_patient(
        self,
        principal: UserPrincipal,
        patient_id: int,
        db: AsyncSession,
    ) -> tuple[Patient, list[AssignedDoctorResponse]]:
        # Ownership is settled before the join so nothing about another
        # user's patient (its doctors, its mappings) is ever read.
        patient = await db.scalar(select(Patient).where(Patient.id == patient_id))
        if not can_read_patient(principal, patient):
            raise NotFoundOrForbidden(
                "Patient not found",
                "Patient does not exist or you do not have permission to view it",
            )

        result = await db.execute(
            select(
                *Doctor.__table__.columns,
                PatientDoctorMapping.assigned_date,
                PatientDoctorMapping.notes,
                PatientDoctorMapping.id.label("mapping_id"),
            )
            .join(PatientDoctorMapping, PatientDoctorMapping.doctor_id == Doctor.id)
            .where(
                PatientDoctorMapping.patient_id == patient.id,
                PatientDoctorMapping.created_by == principal.id,
            )
            .order_by(PatientDoctorMapping.assigned_date.desc(), PatientDoctorMapping.id.desc())
        )
        doctors = [AssignedDoctorResponse.model_validate(dict(row._mapping)) for row in result]
        return patient, doctors

    async def delete(self, principal: UserPrincipal, mapping_id: int, db: AsyncSession) -> None:
        mapping = await db.scalar(select(PatientDoctorMapping).where(PatientDoctorMapping.id == mapping_id))
        if not can_delete_mapping(principal, mapping):
            raise NotFoundOrForbidden(
                "Mapping not found",
                "Mapping does not exist or you do not have permission to delete it",
            )

        await db.delete(mapping)
        await db.flush()
        logger.info("mapping_deleted", mapping_id=mapping_id, user_id=principal.id)


mapping_service = MappingService()
