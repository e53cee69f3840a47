"""
Configuration management for the CISS Workforce backend.
"""

from functools import lru_cache
from typing import Literal, List
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database (Supabase Postgres in production)
    database_url: str = "postgresql://localhost:5432/ciss_workforce"

    # Supabase Auth + Storage
    supabase_url: str = ""
    supabase_anon_key: str = ""
    supabase_service_key: str = ""  # Service role key, needed for claim management and storage

    # Blob storage
    storage_bucket: str = "workforce"
    export_prefix: str = "exports"
    attendance_photo_prefix: str = "attendance"
    employee_photo_prefix: str = "employee_photos"
    # Signed export links are issued once and kept on the job record, so they
    # have to outlive any realistic download window (10 years)
    export_url_expiry_seconds: int = 10 * 365 * 24 * 60 * 60
    # Photos uploaded through bulk import keep a signed URL on the record
    photo_url_expiry_seconds: int = 10 * 365 * 24 * 60 * 60

    # AI document verification
    google_api_key: str = ""
    gemini_model: str = "gemini-1.5-flash"

    # Phone numbers without a country code get this prefix for OTP
    default_country_code: str = "+91"

    # CORS - comma-separated list of allowed origins
    cors_origins: str = "http://localhost:3000,http://localhost:9002"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Debug
    debug: bool = False

    # Security: Authentication & Authorization
    require_auth: bool = True  # Set to False only for local development
    environment: Literal["development", "staging", "production"] = "development"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_anon_key)

    def validate_required_settings(self) -> List[str]:
        """
        Validate required settings for production.
        Returns list of missing/invalid setting names.
        """
        missing = []

        if not self.database_url or self.database_url == "postgresql://localhost:5432/ciss_workforce":
            if self.environment == "production":
                missing.append("DATABASE_URL")

        if not self.supabase_url:
            missing.append("SUPABASE_URL")
        if not self.supabase_anon_key:
            missing.append("SUPABASE_ANON_KEY")

        # Claim management and export uploads need the service role
        if not self.supabase_service_key:
            missing.append("SUPABASE_SERVICE_KEY (required for admin claims and exports)")

        if not self.google_api_key:
            missing.append("GOOGLE_API_KEY (document verification disabled)")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience exports
settings = get_settings()
