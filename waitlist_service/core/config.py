from typing import Optional

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class AdditionalFieldSetting(BaseModel):
    type: str = "string"
    required: bool = False


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str

    # Auth
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    JWT_REFRESH_TOKEN_EXPIRE_DAYS: int = 30

    # Waitlist
    WAITLIST_ENABLED: bool = False
    WAITLIST_ALLOWED_DOMAINS: Optional[list[str]] = None
    WAITLIST_MAXIMUM_PARTICIPANTS: Optional[int] = None
    # JSON object, e.g. {"name": {"type": "string", "required": true}}
    WAITLIST_ADDITIONAL_FIELDS: dict[str, AdditionalFieldSetting] = {}
    WAITLIST_DISABLE_SIGN_IN_AND_SIGN_UP: bool = False
    WAITLIST_ADMIN_ROLE: str = "admin"
    WAITLIST_DEFAULT_PAGE_SIZE: int = 10
    WAITLIST_MAX_PAGE_SIZE: int = 100


settings = Settings()
