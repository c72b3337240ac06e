import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from healthcare_backend.auth import UserPrincipal
from healthcare_backend.exceptions import NotFoundOrForbidden
from healthcare_backend.models.patient import Patient
from healthcare_backend.policy import can_read_patient, can_write_patient
from healthcare_backend.schemas.patient import PatientCreate, PatientUpdate

logger = structlog.get_logger(__name__)


def _not_found(action: str) -> NotFoundOrForbidden:
    return NotFoundOrForbidden(
        "Patient not found",
        f"Patient does not exist or you do not have permission to {action} it",
    )


class PatientService:
    async def create(self, principal: UserPrincipal, data: PatientCreate, db: AsyncSession) -> Patient:
        patient = Patient(**data.model_dump(), created_by=principal.id)
        db.add(patient)
        await db.flush()
        await db.refresh(patient)
        logger.info("patient_created", patient_id=patient.id, user_id=principal.id)
        return patient

    async def list_owned(self, principal: UserPrincipal, db: AsyncSession) -> list[Patient]:
        result = await db.execute(
            select(Patient).where(Patient.created_by == principal.id).order_by(Patient.id)
        )
        return list(result.scalars().all())

    async def _load(self, patient_id: int, db: AsyncSession) -> Patient | None:
        result = await db.execute(select(Patient).where(Patient.id == patient_id))
        return result.scalar_one_or_none()

    async def get_by_id(self, principal: UserPrincipal, patient_id: int, db: AsyncSession) -> Patient:
        patient = await self._load(patient_id, db)
        if not can_read_patient(principal, patient):
            raise _not_found("view")
        return patient

    async def update(
        self,
        principal: UserPrincipal,
        patient_id: int,
        data: PatientUpdate,
        db: AsyncSession,
    ) -> Patient:
        patient = await self._load(patient_id, db)
        if not can_write_patient(principal, patient):
            raise _not_found("update")

        # Full replacement; created_by is not part of the payload and never changes
        for key, value in data.model_dump().items():
            setattr(patient, key, value)

        await db.flush()
        await db.refresh(patient)
        logger.info("patient_updated", patient_id=patient.id, user_id=principal.id)
        return patient

    async def delete(self, principal: UserPrincipal, patient_id: int, db: AsyncSession) -> None:
        patient = await self._load(patient_id, db)
        if not can_write_patient(principal, patient):
            raise _not_found("delete")

        # Mappings referencing the patient go with it (ON DELETE CASCADE)
        await db.delete(patient)
        await db.flush()
        logger.info("patient_deleted", patient_id=patient_id, user_id=principal.id)


patient_service = PatientService()
