from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession
from healthcare_backend.database import get_db
from healthcare_backend.schemas import MAX_ID
from healthcare_backend.schemas.mapping import MappingCreate
from healthcare_backend.services.mapping_service import mapping_service
from healthcare_backend.auth import get_current_user, UserPrincipal

router = APIRouter()


@router.post("", status_code=201)
async def create_mapping(
    data: MappingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    mapping = await mapping_service.create(current_user, data, db)
    await db.commit()
    return {"message": "Doctor assigned to patient successfully", "mapping": mapping}


@router.get("")
async def list_mappings(
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    mappings = await mapping_service.list_owned(current_user, db)
    return {
        "message": "Mappings retrieved successfully",
        "mappings": mappings,
        "count": len(mappings),
    }


@router.get("/id/{mapping_id}")
async def get_mapping(
    mapping_id: int = Path(..., ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    mapping = await mapping_service.get_by_id(current_user, mapping_id, db)
    return {"message": "Mapping retrieved successfully", "mapping": mapping}


@router.get("/{patient_id}")
async def get_patient_doctors(
    patient_id: int = Path(..., ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    patient, doctors = await mapping_service.list_doctors_for_patient(current_user, patient_id, db)
    return {
        "message": "Patient doctors retrieved successfully",
        "patient": {"id": patient.id, "name": patient.name},
        "doctors": doctors,
        "count": len(doctors),
    }


@router.delete("/{mapping_id}")
async def delete_mapping(
    mapping_id: int = Path(..., ge=1, le=MAX_ID),
    db: AsyncSession = Depends(get_db),
    current_user: UserPrincipal = Depends(get_current_user),
):
    await mapping_service.delete(current_user, mapping_id, db)
    await db.commit()
    return {"message": "Doctor unassigned from patient successfully"}
