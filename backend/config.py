# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    DATABASE_URL: str = "sqlite:///./bebe_depot.db"

    PORT: int = 3000
    FRONTEND_URL: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    # Product photos
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    # Refuse backward command status changes (DELIVERED -> NOT_DELIVERED, ...)
    ENFORCE_FORWARD_STATUS: bool = False

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra = "ignore"

settings = Settings()
