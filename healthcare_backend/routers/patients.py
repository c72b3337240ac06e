from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession
from healthcare_backend.database import get_db
from healthcare_backend.schemas import MAX_ID
from healthcare_backend.schemas.patient import PatientCreate, PatientUpdate, PatientResponse
from healthcare_backend.services.patient_service import patient_service
from healthcare_backend.auth import get_current_user, UserPrincipal

router = APIRouter()


@router.post("", status_code=201)
async def create_patient(
    data: PatientCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    patient = await patient_service.create(current_user, data, db)
    await db.commit()
    return {
        "message": "Patient created successfully",
        "patient": PatientResponse.model_validate(patient),
    }


@router.get("")
async def list_patients(
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    patients = await patient_service.list_owned(current_user, db)
    return {
        "message": "Patients retrieved successfully",
        "patients": [PatientResponse.model_validate(p) for p in patients],
        "count": len(patients),
    }


@router.get("/{patient_id}")
async def get_patient(
    patient_id: int = Path(..., ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    patient = await patient_service.get_by_id(current_user, patient_id, db)
    return {
        "message": "Patient retrieved successfully",
        "patient": PatientResponse.model_validate(patient),
    }


@router.put("/{patient_id}")
async def update_patient(
    data: PatientUpdate,
    patient_id: int = Path(..., ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    patient = await patient_service.update(current_user, patient_id, data, db)
    await db.commit()
    return {
        "message": "Patient updated successfully",
        "patient": PatientResponse.model_validate(patient),
    }


@router.delete("/{patient_id}")
async def delete_patient(
    patient_id: int = Path(..., ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    await patient_service.delete(current_user, patient_id, db)
    await db.commit()
    return {"message": "Patient deleted successfully"}
