"""Application configuration."""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Coordinate resolution settings.

    Environment variables will be loaded and validated using Pydantic.
    """

    app_name: str = "georesolver"
    version: str = "0.1.0"

    # Primary provider (Google Geocoding); no key means the tier is skipped
    GOOGLE_GEOCODING_API_KEY: str | None = None
    GOOGLE_GEOCODING_DOMAIN: str = "maps.googleapis.com"
    GEOCODING_PRIMARY_TIMEOUT: float = Field(default=5.0, gt=0)

    # Secondary provider (Nominatim)
    NOMINATIM_DOMAIN: str = "nominatim.openstreetmap.org"
    NOMINATIM_USER_AGENT: str = "georesolver/0.1 (contact@example.com)"
    GEOCODING_SECONDARY_TIMEOUT: float = Field(default=10.0, gt=0)

    # Cache Settings
    GEOCODING_CACHE_TTL: int = Field(default=86400, ge=0)  # 24 hours
    GEOCODING_CACHE_MAX_SIZE: int = Field(default=1000, ge=1)

    # Rate limiting (per caller id, sliding window)
    GEOCODING_RATE_LIMIT_MAX_REQUESTS: int = Field(default=60, ge=1)
    GEOCODING_RATE_LIMIT_WINDOW: float = Field(default=60.0, gt=0)

    # Default resilient executor
    GEOCODING_MAX_RETRIES: int = Field(default=2, ge=0)
    GEOCODING_ERROR_WAIT_SECONDS: float = Field(default=1.0, ge=0)

    GEOCODING_MAX_ADDRESS_LENGTH: int = 500

    # Conflict resolution memo bucket
    CONFLICT_TIME_BUCKET_SECONDS: int = Field(default=3600, ge=1)

    # Redis Settings (optional registry persistence)
    REDIS_URL: str | None = None
    REDIS_KEY_PREFIX: str = "georesolver:"

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",  # Allow extra fields in environment
    )

    @model_validator(mode="after")
    def use_test_redis_for_testing(self) -> "Settings":
        """Use a separate Redis database for tests to ensure isolation."""
        import os

        if os.getenv("TESTING") == "true" and self.REDIS_URL:
            test_redis_url = os.getenv("TEST_REDIS_URL")
            if test_redis_url:
                self.REDIS_URL = test_redis_url
            elif "/0" in self.REDIS_URL:
                # Switch from database 0 to database 1 for tests
                self.REDIS_URL = self.REDIS_URL.replace("/0", "/1")
        return self


# Create settings instance
settings = Settings()
