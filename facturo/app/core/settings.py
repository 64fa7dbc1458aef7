"""Application settings loaded from the environment (and `.env` when present)."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "Facturo"
    API_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"

    DATABASE_URL: str = "sqlite:///./facturo.db"

    SECRET_KEY: str = "CHANGE_ME"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    APP_BASE_URL: str = "http://localhost:3000"
    PASSWORD_RESET_EXPIRE_SECONDS: int = 3600

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    LOG_LEVEL: str = "INFO"

    SUPER_ADMIN_EMAIL: str = "superadmin@facturo.app"
    SUPER_ADMIN_PASSWORD: str = "Secret123!"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() in ("development", "dev", "local")


@lru_cache
def get_settings() -> Settings:
    """Return a singleton Settings instance."""
    return Settings()
