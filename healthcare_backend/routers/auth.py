from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from healthcare_backend.database import get_db
from healthcare_backend.schemas.user import LoginRequest, RegisterRequest, UserResponse
from healthcare_backend.services.user_service import user_service

router = APIRouter()


@router.post("/register", status_code=201)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    user, token = await user_service.register(body, db)
    await db.commit()
    return {
        "message": "User registered successfully",
        "user": UserResponse.model_validate(user),
        "token": token,
    }


@router.post("/login")
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Exchange email and password for a bearer token."""
    user, token = await user_service.login(body, db)
    return {
        "message": "Login successful",
        "user": UserResponse.model_validate(user),
        "token": token,
    }
