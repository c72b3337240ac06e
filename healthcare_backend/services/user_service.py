import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from healthcare_backend.auth import create_token, hash_password, verify_password
from healthcare_backend.exceptions import Conflict, Unauthenticated
from healthcare_backend.models.user import User
from healthcare_backend.schemas.user import LoginRequest, RegisterRequest

logger = structlog.get_logger(__name__)


def _user_exists() -> Conflict:
    return Conflict("User already exists", "A user with this email already exists")


class UserService:
    async def register(self, data: RegisterRequest, db: AsyncSession) -> tuple[User, str]:
        existing = await db.scalar(select(User.id).where(User.email == data.email))
        if existing is not None:
            raise _user_exists()

        user = User(name=data.name, email=data.email, password=hash_password(data.password))
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            raise _user_exists()
        await db.refresh(user)

        logger.info("user_registered", user_id=user.id)
        return user, create_token(user)

    async def login(self, data: LoginRequest, db: AsyncSession) -> tuple[User, str]:
        user = await db.scalar(select(User).where(User.email == data.email))
        # Unknown email and wrong password are reported identically
        if user is None or not verify_password(user.password, data.password):
            logger.info("login_failed")
            raise Unauthenticated("Invalid credentials", "Email or password is incorrect")

        logger.info("user_logged_in", user_id=user.id)
        return user, create_token(user)


user_service = UserService()
