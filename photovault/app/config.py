"""Application configuration using Pydantic Settings."""
from typing import List, Optional
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables or `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "PhotoVault"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = "/api"
    FRONTEND_URL: str = "http://localhost:3000"
    CORS_ORIGINS: str = "*"

    # Database
    DATABASE_URL: str = "sqlite:///./photovault.db"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10

    # Identity provider
    AUTH0_DOMAIN: str = "photovault.auth0.com"
    AUTH0_AUDIENCE: str = "https://api.photovault.local"
    AUTH_HTTP_TIMEOUT_SECONDS: float = 5.0
    JWKS_CACHE_TTL_SECONDS: int = 600
    JWKS_MIN_REFRESH_SECONDS: int = 30

    # AWS / S3
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    S3_REGION: str = "us-east-1"
    S3_BUCKET_NAME: str = "photovault-photos"
    S3_ENDPOINT_URL: Optional[str] = None
    S3_CONNECT_TIMEOUT: float = 3.0
    S3_READ_TIMEOUT: float = 10.0
    S3_URL_WORKERS: int = Field(8, ge=1)

    # Presigned URL lifetimes (seconds)
    PRIVATE_URL_TTL_SECONDS: int = 3600
    PUBLIC_URL_TTL_SECONDS: int = 7200
    UPLOAD_URL_TTL_SECONDS: int = 3600

    MAX_UPLOAD_BYTES: int = 50 * 1024 * 1024

    @computed_field
    @property
    def AUTH0_ISSUER(self) -> str:
        return f"https://{self.AUTH0_DOMAIN}/"

    @computed_field
    @property
    def JWKS_URL(self) -> str:
        return f"https://{self.AUTH0_DOMAIN}/.well-known/jwks.json"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


settings = Settings()
