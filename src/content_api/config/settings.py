# src/content_api/config/settings.py
import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

VALID_ENVIRONMENTS = ["development", "production", "test"]
VALID_STORAGE_MODES = ["mongodb", "local"]
UNSAFE_ADMIN_PASSWORDS = {"admin123"}
MIN_JWT_SECRET_LENGTH = 32

DEV_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:3001",
    "http://127.0.0.1:3000",
]


class Settings(BaseSettings):
    """
    Single source of truth for all application settings.

    Configuration precedence:
    1. Explicit keyword arguments (used by tests)
    2. Environment variables
    3. .env file (if exists)
    4. Default values in this class

    The object is frozen once built; ``create_app`` and the CLI receive it
    explicitly instead of reading the environment themselves.
    """

    # Application Settings
    app_name: str = Field(
        default="King Arthur Capital API",
        description="Application name"
    )

    api_version: str = Field(default="v1", description="API version reported by /health")

    api_prefix: str = Field(default="/api", description="Prefix for every route")

    environment: str = Field(
        default="development",
        description="Runtime environment: development, production or test"
    )

    # Server
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8085, description="Bind port")
    shutdown_grace_seconds: int = Field(
        default=10,
        description="Seconds to wait for in-flight requests on shutdown"
    )

    # Storage
    storage_mode: str = Field(
        default="mongodb",
        description="Storage backend: mongodb (MongoDB + GridFS) or local (SQLite + filesystem)"
    )

    mongodb_uri: Optional[str] = Field(default=None, description="MongoDB connection string")
    mongodb_db_name: Optional[str] = Field(
        default=None,
        description="Database name (defaults to the path of the connection string)"
    )
    db_pool_size: int = Field(default=10)
    db_timeout_ms: int = Field(default=5000)
    db_socket_timeout_ms: int = Field(default=45000)

    gridfs_bucket_name: str = Field(default="uploads")
    gridfs_chunk_size_bytes: int = Field(default=261120, description="255KB GridFS chunks")

    storage_dir: str = Field(default="storage", description="Local storage directory")
    local_db_file: str = Field(default="content.db", description="SQLite file inside storage_dir")

    # Authentication
    jwt_secret: str = Field(..., description="Signing key for admin tokens")
    jwt_algorithm: str = Field(default="HS256")
    jwt_expires_hours: int = Field(default=24, ge=1)
    admin_password: str = Field(..., description="Shared admin secret")

    # CORS
    frontend_url: Optional[str] = Field(default=None)
    production_frontend_url: Optional[str] = Field(default=None)
    additional_allowed_origins: str = Field(
        default="",
        description="Comma separated extra origins allowed in production"
    )

    # File Upload
    max_file_size: int = Field(default=5 * 1024 * 1024, description="Maximum upload size in bytes")
    allowed_mime_types: str = Field(
        default="image/jpeg,image/jpg,image/png,image/gif,image/webp",
        description="Comma separated MIME types accepted for images"
    )

    # Rate Limiting
    rate_limit_enabled: bool = Field(default=False)
    rate_limit_window_seconds: int = Field(default=15 * 60, ge=1)
    rate_limit_max: int = Field(default=100, ge=1)

    # Cache
    image_cache_max_age: int = Field(default=31536000, description="1 year in seconds")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    @field_validator('environment')
    def validate_environment(cls, v):
        """Validate environment is one of the allowed values."""
        v = v.lower()
        if v not in VALID_ENVIRONMENTS:
            raise ValueError(f"Invalid environment: {v}. Must be one of {VALID_ENVIRONMENTS}")
        return v

    @field_validator('storage_mode')
    def validate_storage_mode(cls, v):
        """Validate storage mode is one of the allowed values."""
        v = v.lower()
        if v not in VALID_STORAGE_MODES:
            raise ValueError(f"Invalid storage_mode: {v}. Must be one of {VALID_STORAGE_MODES}")
        return v

    @field_validator('log_level')
    def normalize_log_level(cls, v):
        v = v.upper()
        if not isinstance(logging.getLevelName(v), int):
            raise ValueError(f"Invalid log_level: {v}")
        return v

    @field_validator('jwt_secret', 'admin_password')
    def require_non_empty(cls, v):
        if not v:
            raise ValueError("must not be empty")
        return v

    @model_validator(mode='after')
    def check_required_and_unsafe_values(self):
        """Reject configurations that must not start."""
        if self.storage_mode == "mongodb" and not self.mongodb_uri:
            raise ValueError("MONGODB_URI is required when STORAGE_MODE is mongodb")

        if self.is_production and self.admin_password in UNSAFE_ADMIN_PASSWORDS:
            raise ValueError("Default admin password detected in production. Change ADMIN_PASSWORD.")

        if len(self.jwt_secret) < MIN_JWT_SECRET_LENGTH:
            logger.warning(
                f"JWT_SECRET should be at least {MIN_JWT_SECRET_LENGTH} characters long "
                f"(current length: {len(self.jwt_secret)})"
            )
        return self

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def cors_origins(self) -> List[str]:
        """Origins allowed by CORS for the current environment."""
        if self.is_production:
            extra = [o.strip() for o in self.additional_allowed_origins.split(",")]
            return [o for o in [self.production_frontend_url, *extra] if o]
        origins = [self.frontend_url or DEV_ORIGINS[0], *DEV_ORIGINS]
        return list(dict.fromkeys(origins))

    @property
    def allowed_mime_type_list(self) -> List[str]:
        return [t.strip().lower() for t in self.allowed_mime_types.split(",") if t.strip()]

    @property
    def local_db_path(self) -> str:
        return str(Path(self.storage_dir) / self.local_db_file)

    def public_summary(self) -> dict:
        """Effective configuration without secrets, for show-config and logs."""
        return {
            "environment": self.environment,
            "api_prefix": self.api_prefix,
            "host": self.host,
            "port": self.port,
            "storage_mode": self.storage_mode,
            "mongodb_db_name": self.mongodb_db_name,
            "gridfs_bucket_name": self.gridfs_bucket_name,
            "storage_dir": self.storage_dir,
            "cors_origins": self.cors_origins,
            "max_file_size": self.max_file_size,
            "allowed_mime_types": self.allowed_mime_type_list,
            "rate_limit_enabled": self.rate_limit_enabled,
            "rate_limit": f"{self.rate_limit_max}/{self.rate_limit_window_seconds}s",
            "jwt_expires_hours": self.jwt_expires_hours,
            "log_level": self.log_level,
        }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
