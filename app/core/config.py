from datetime import time
from typing import Optional

from pydantic import ValidationError as SettingsValidationError
from pydantic import field_validator
from pydantic_settings import BaseSettings

from app.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    PROJECT_NAME: str = "Attendance Service"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"

    # Database
    DATABASE_URL: str

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # CORS
    BACKEND_CORS_ORIGINS: list[str] = []

    LOG_LEVEL: str = "INFO"

    # Attendance sessions
    ATTENDANCE_BASE_SECRET: str
    ATTENDANCE_PIN_LENGTH: int = 6
    ATTENDANCE_LATE_GRACE_MINUTES: int = 5
    # UTC time of day, used when a class has no start time
    ATTENDANCE_LATE_CUTOFF: Optional[time] = None

    @field_validator("ATTENDANCE_BASE_SECRET")
    @classmethod
    def base_secret_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("ATTENDANCE_BASE_SECRET must not be blank")
        return value

    class Config:
        env_file = ".env"
        case_sensitive = True


def load_settings() -> Settings:
    try:
        return Settings()
    except SettingsValidationError as e:
        missing = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        raise ConfigurationError(f"Invalid or missing settings: {missing}") from e


settings = load_settings()
