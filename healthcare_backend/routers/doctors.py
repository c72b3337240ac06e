from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession
from healthcare_backend.database import get_db
from healthcare_backend.schemas import MAX_ID
from healthcare_backend.schemas.doctor import DoctorCreate, DoctorUpdate, DoctorResponse
from healthcare_backend.services.doctor_service import doctor_service
from healthcare_backend.auth import get_current_user, UserPrincipal

router = APIRouter()


@router.post("", status_code=201)
async def create_doctor(
    data: DoctorCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    doctor = await doctor_service.create(current_user, data, db)
    await db.commit()
    return {
        "message": "Doctor created successfully",
        "doctor": DoctorResponse.model_validate(doctor),
    }


@router.get("")
async def list_doctors(
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    doctors = await doctor_service.list_all(current_user, db)
    return {
        "message": "Doctors retrieved successfully",
        "doctors": [DoctorResponse.model_validate(d) for d in doctors],
        "count": len(doctors),
    }


@router.get("/{doctor_id}")
async def get_doctor(
    doctor_id: int = Path(..., ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    doctor = await doctor_service.get_by_id(current_user, doctor_id, db)
    return {
        "message": "Doctor retrieved successfully",
        "doctor": DoctorResponse.model_validate(doctor),
    }


@router.put("/{doctor_id}")
async def update_doctor(
    data: DoctorUpdate,
    doctor_id: int = Path(..., ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    doctor = await doctor_service.update(current_user, doctor_id, data, db)
    await db.commit()
    return {
        "message": "Doctor updated successfully",
        "doctor": DoctorResponse.model_validate(doctor),
    }


@router.delete("/{doctor_id}")
async def delete_doctor(
    doctor_id: int = Path(..., ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    await doctor_service.delete(current_user, doctor_id, db)
    await db.commit()
    return {"message": "Doctor deleted successfully"}
