"""Application configuration with environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"

    # App Version
    VERSION: str = "1.0.0"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./contacts.db"

    # Bearer Token (supports key rotation)
    JWT_SECRET: str = "change-this-in-production"
    JWT_SECRET_PREVIOUS: str = ""  # Set during rotation, clear after
    JWT_ISSUER: str = "maliev-auth"
    JWT_AUDIENCE: str = "maliev-services"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_HOURS: int = 4

    # CORS
    CORS_ORIGINS: str = "https://maliev.com,http://maliev.com"
    CORS_ORIGIN_REGEX: str = r"https?://.*\.maliev\.com"

    # Upload Service (external file storage)
    UPLOAD_SERVICE_BASE_URL: str = "http://localhost:8080"
    UPLOAD_SERVICE_TIMEOUT_SECONDS: int = Field(30, ge=1, le=300)

    # Cache
    CACHE_DEFAULT_EXPIRATION_MINUTES: int = Field(5, ge=1)
    CACHE_MAX_SIZE: int = 1000

    # Error Tracking (optional, set in production)
    SENTRY_DSN: str = ""

    # Rate Limiting (requests per minute)
    RATE_LIMIT_API: int = 1000  # Authenticated endpoints
    RATE_LIMIT_CONTACT: int = 10  # Public contact form submissions

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def jwt_secrets(self) -> list[str]:
        """Returns list of valid secrets (current first, then previous if set)."""
        secrets = [self.JWT_SECRET]
        if self.JWT_SECRET_PREVIOUS:
            secrets.append(self.JWT_SECRET_PREVIOUS)
        return secrets

    @property
    def cache_ttl_seconds(self) -> int:
        return self.CACHE_DEFAULT_EXPIRATION_MINUTES * 60


settings = Settings()
