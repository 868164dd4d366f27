"""Configuración de la aplicación (variables de entorno / .env)."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Base de datos
    database_url: str = "sqlite:///./league.db"
    database_echo: bool = False

    # Auth (JWT)
    secret_key: str = "change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 12

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Frontend
    cors_origins: list[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    @field_validator("secret_key", "database_url", mode="after")
    @classmethod
    def strip_value(cls, value: str) -> str:
        # Los secretos de algunos proveedores llegan con BOM o espacios
        return value.lstrip("\ufeff").strip()

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


settings = Settings()
