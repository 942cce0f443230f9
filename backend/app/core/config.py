# app/core/config.py
"""
Application configuration using Pydantic Settings
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
import json
from pydantic import field_validator


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables
    """

    # Application
    APP_NAME: str = "Highlight Tax Services"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    FRONTEND_URL: str = "http://localhost:5000"

    # Database
    DATABASE_URL: str = "sqlite:///./highlight_tax.db"

    # JWT Authentication
    JWT_SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    AUTH_COOKIE_NAME: str = "token"
    COOKIE_SECURE: bool = False
    RESET_TOKEN_EXPIRE_HOURS: int = 1

    # Supabase (OAuth provider sessions)
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""

    # Portal routing
    LOGIN_PATH: str = "/portal"
    DASHBOARD_PATH: str = "/dashboard"
    ADMIN_PATH: str = "/admin"
    OAUTH_ERROR_REDIRECT_DELAY_MS: int = 3000

    # Email delivery
    EMAIL_PROVIDER: str = "dev"  # dev | resend
    RESEND_API_KEY: str = ""
    RESEND_FROM_EMAIL: str = "noreply@highlighttax.com"
    ADMIN_EMAIL: str = "servicestaxx@gmail.com"

    # Cloudflare R2 (S3-compatible)
    R2_ACCOUNT_ID: str = ""
    R2_ACCESS_KEY_ID: str = ""
    R2_SECRET_ACCESS_KEY: str = ""
    R2_BUCKET_NAME: str = ""
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB

    # Lead capture
    WHATSAPP_NUMBER: str = "19172574554"

    # Scheduled cleanup of expired sessions / reset tokens
    SCHEDULER_ENABLED: bool = True
    CLEANUP_INTERVAL_MINUTES: int = 60

    # Seeded admin account (app/db/seed.py)
    SEED_ADMIN_EMAIL: str = "admin@highlighttax.com"
    SEED_ADMIN_PASSWORD: Optional[str] = None

    # CORS
    CORS_ORIGINS: str = '["http://localhost:5000"]'
    CORS_ORIGIN_REGEX: Optional[str] = None

    @field_validator("SUPABASE_URL", "FRONTEND_URL", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip().rstrip("/")
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from string to list"""
        try:
            if isinstance(self.CORS_ORIGINS, str):
                return json.loads(self.CORS_ORIGINS)
            return self.CORS_ORIGINS
        except json.JSONDecodeError:
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def supabase_configured(self) -> bool:
        return bool(self.SUPABASE_URL and self.SUPABASE_ANON_KEY)

    @property
    def r2_configured(self) -> bool:
        return bool(
            self.R2_ACCOUNT_ID
            and self.R2_ACCESS_KEY_ID
            and self.R2_SECRET_ACCESS_KEY
            and self.R2_BUCKET_NAME
        )

    @property
    def r2_endpoint_url(self) -> str:
        return f"https://{self.R2_ACCOUNT_ID}.r2.cloudflarestorage.com"


# Create settings instance
settings = Settings()
