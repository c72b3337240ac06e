from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from healthcare_backend.auth import UserPrincipal
from healthcare_backend.config import get_settings
from healthcare_backend.exceptions import Conflict, NotFoundOrForbidden
from healthcare_backend.models.doctor import Doctor
from healthcare_backend.policy import can_read_doctor, can_write_doctor
from healthcare_backend.schemas.doctor import DoctorBase, DoctorCreate, DoctorUpdate

logger = structlog.get_logger(__name__)


def _not_found() -> NotFoundOrForbidden:
    return NotFoundOrForbidden("Doctor not found", "Doctor does not exist")


class DoctorService:
    def __init__(self, restrict_writes: Optional[bool] = None):
        self._restrict_writes = restrict_writes

    @property
    def restrict_writes(self) -> bool:
        if self._restrict_writes is None:
            return get_settings().restrict_doctor_writes
        return self._restrict_writes

    async def _find_conflict(
        self,
        data: DoctorBase,
        db: AsyncSession,
        exclude_id: Optional[int] = None,
    ) -> Optional[Conflict]:
        query = select(Doctor.id).where(Doctor.license_number == data.license_number)
        if exclude_id is not None:
            query = query.where(Doctor.id != exclude_id)
        if await db.scalar(query.limit(1)) is not None:
            if exclude_id is not None:
                return Conflict(
                    "License number conflict",
                    "Another doctor with this license number already exists",
                )
            return Conflict(
                "Doctor already exists",
                "A doctor with this license number already exists",
            )

        if data.email:
            query = select(Doctor.id).where(Doctor.email == data.email)
            if exclude_id is not None:
                query = query.where(Doctor.id != exclude_id)
            if await db.scalar(query.limit(1)) is not None:
                return Conflict(
                    "Doctor already exists",
                    "A doctor with this email already exists",
                )
        return None

    async def _flush_or_conflict(self, db: AsyncSession) -> None:
        # The pre-check can lose a race against a concurrent writer; the
        # unique constraints are what actually decide.
        try:
            await db.flush()
        except IntegrityError as e:
            logger.info("doctor_conflict", reason=str(e.orig))
            raise Conflict(
                "Doctor already exists",
                "A doctor with this license number or email already exists",
            )

    async def create(self, principal: UserPrincipal, data: DoctorCreate, db: AsyncSession) -> Doctor:
        conflict = await self._find_conflict(data, db)
        if conflict:
            raise conflict

        doctor = Doctor(**data.model_dump(), created_by=principal.id)
        db.add(doctor)
        await self._flush_or_conflict(db)
        await db.refresh(doctor)
        logger.info("doctor_created", doctor_id=doctor.id, user_id=principal.id)
        return doctor

    async def list_all(self, principal: UserPrincipal, db: AsyncSession) -> list[Doctor]:
        result = await db.execute(select(Doctor).order_by(Doctor.name, Doctor.id))
        return list(result.scalars().all())

    async def _load(self, doctor_id: int, db: AsyncSession) -> Optional[Doctor]:
        result = await db.execute(select(Doctor).where(Doctor.id == doctor_id))
        return result.scalar_one_or_none()

    async def get_by_id(self, principal: UserPrincipal, doctor_id: int, db: AsyncSession) -> Doctor:
        doctor = await self._load(doctor_id, db)
        if not can_read_doctor(principal, doctor):
            raise _not_found()
        return doctor

    async def update(
        self,
        principal: UserPrincipal,
        doctor_id: int,
        data: DoctorUpdate,
        db: AsyncSession,
    ) -> Doctor:
        doctor = await self._load(doctor_id, db)
        if not can_write_doctor(principal, doctor, restrict=self.restrict_writes):
            raise _not_found()

        conflict = await self._find_conflict(data, db, exclude_id=doctor.id)
        if conflict:
            raise conflict

        for key, value in data.model_dump().items():
            setattr(doctor, key, value)

        await self._flush_or_conflict(db)
        await db.refresh(doctor)
        logger.info("doctor_updated", doctor_id=doctor.id, user_id=principal.id)
        return doctor

    async def delete(self, principal: UserPrincipal, doctor_id: int, db: AsyncSession) -> None:
        doctor = await self._load(doctor_id, db)
        if not can_write_doctor(principal, doctor, restrict=self.restrict_writes):
            raise _not_found()

        await db.delete(doctor)
        await db.flush()
        logger.info("doctor_deleted", doctor_id=doctor_id, user_id=principal.id)


doctor_service = DoctorService()
