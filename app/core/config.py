"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "ats_user"
    postgres_password: str = "password"
    postgres_db: str = "ats_db"

    # Full URL override (e.g. sqlite:// for tests)
    database_url: Optional[str] = None

    # MongoDB (legacy application tracking)
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "ats_docs"

    # Sessions
    session_secret: str = "your-secret-key-change-in-production"
    session_max_age: int = 24 * 60 * 60
    https_only_cookies: bool = False
    csrf_enabled: bool = True
    bcrypt_rounds: int = 12

    # Frontend origin (CORS + OAuth redirects)
    frontend_url: str = "http://localhost:5173"

    # Google OAuth
    google_client_id: str = ""
    google_client_secret: str = ""
    google_callback_url: str = "http://localhost:8000/api/auth/google/callback"

    # Password reset tokens
    reset_token_secret: str = "change-this-reset-secret"
    reset_token_algorithm: str = "HS256"
    reset_token_expire_minutes: int = 60

    # File storage
    upload_dir: str = "uploads"

    # App
    auto_create_schema: bool = True
    log_level: str = "INFO"
    debug: bool = False

    @property
    def postgres_url(self) -> str:
        """Construct PostgreSQL connection URL"""
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def sqlalchemy_url(self) -> str:
        return self.database_url or self.postgres_url

    @property
    def google_configured(self) -> bool:
        return bool(self.google_client_id and self.google_client_secret)

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()


# Placeholder picture for profiles without an upload
DEFAULT_PROFILE_PICTURE = "https://cdn.pixabay.com/photo/2015/10/05/22/37/blank-profile-picture-973460_640.png"
