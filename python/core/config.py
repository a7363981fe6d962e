"""
Application configuration via Pydantic Settings.
Loads from environment variables with validation and defaults.
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field
from functools import lru_cache

VERSION = "1.0.0"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # === Server ===
    server_host: str = Field(default="0.0.0.0", alias="SERVER_HOST")
    server_port: int = Field(default=8001, alias="SERVER_PORT")
    debug: bool = Field(default=False, alias="DEBUG")

    # === Supabase ===
    supabase_url: str = Field(..., alias="SUPABASE_URL")
    supabase_service_role_key: str = Field(..., alias="SUPABASE_SERVICE_ROLE_KEY")
    supabase_jwt_secret: Optional[str] = Field(default=None, alias="SUPABASE_JWT_SECRET")
    require_auth: bool = Field(default=False, alias="REQUIRE_AUTH")

    # === CORS ===
    allowed_origins: str = Field(default="*", alias="ALLOWED_ORIGINS")

    # === Signature storage ===
    storage_backend: str = Field(default="supabase", alias="STORAGE_BACKEND")  # supabase | minio
    signatures_bucket: str = Field(default="signatures", alias="SIGNATURES_BUCKET")
    signatures_folder: str = Field(default="signatures", alias="SIGNATURES_FOLDER")

    # === MinIO (only for STORAGE_BACKEND=minio) ===
    minio_endpoint: str = Field(default="localhost:9000", alias="MINIO_ENDPOINT")
    minio_access_key: str = Field(default="minioadmin", alias="MINIO_ACCESS_KEY")
    minio_secret_key: str = Field(default="minioadmin", alias="MINIO_SECRET_KEY")
    minio_secure: bool = Field(default=False, alias="MINIO_SECURE")
    minio_public_url: str = Field(default="http://localhost:9000", alias="MINIO_PUBLIC_URL")

    # === Recognition backend ===
    recognition_base_url: str = Field(default="http://localhost:8081", alias="RECOGNITION_BASE_URL")
    recognition_timeout_seconds: float = Field(default=10.0, gt=0, alias="RECOGNITION_TIMEOUT_SECONDS")
    recognition_max_retries: int = Field(default=2, ge=0, alias="RECOGNITION_MAX_RETRIES")

    # === Sample intake ===
    max_sample_bytes: int = Field(default=2 * 1024 * 1024, gt=0, alias="MAX_SAMPLE_BYTES")
    allowed_media_types: str = Field(
        default="image/png,image/jpeg,image/webp",
        alias="ALLOWED_MEDIA_TYPES"
    )

    # === Verification ===
    default_similarity_threshold: float = Field(default=0.70, gt=0, le=1, alias="DEFAULT_SIMILARITY_THRESHOLD")
    comparison_backend: str = Field(default="features", alias="COMPARISON_BACKEND")  # features | rpc

    @property
    def cors_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS into list."""
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    @property
    def media_types(self) -> List[str]:
        """Parse ALLOWED_MEDIA_TYPES into list."""
        return [t.strip().lower() for t in self.allowed_media_types.split(",") if t.strip()]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Ignore extra env vars


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
