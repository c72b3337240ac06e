from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings."""

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./healthcare.db",
        env="DATABASE_URL",
    )

    # Auth
    jwt_secret_key: str = Field(..., env="JWT_SECRET_KEY")
    jwt_expire_seconds: int = Field(default=86400, env="JWT_EXPIRE_SECONDS")  # 24 hours

    # Doctors are directory data; when set, only the creator may update/delete one
    restrict_doctor_writes: bool = Field(default=False, env="RESTRICT_DOCTOR_WRITES")

    # Runtime
    environment: str = Field(default="development", env="ENVIRONMENT")
    log_level: str = Field(default="INFO", env="LOG_LEVEL")
    cors_origins: list[str] = Field(default=["*"], env="CORS_ORIGINS")

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
