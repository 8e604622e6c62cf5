"""
Configuration management for the attendance & leave policy engine
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import Optional, List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Required settings
    DATABASE_URL: str = Field(..., description="SQLAlchemy database URL")
    JWT_SECRET_KEY: str = Field(..., description="Shared secret used to verify identity tokens")

    JWT_ALGORITHM: str = Field(default="HS256", description="JWT algorithm")
    JWT_EXPIRE_MINUTES: int = Field(default=120, description="Lifetime of tokens minted by create_access_token")

    APP_ENV: str = Field(default="local", description="Application environment: local, staging, prod")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level: DEBUG, INFO, WARNING, ERROR")

    ALLOWED_ORIGINS: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins. Use '*' for local only."
    )

    # Work dates, required check-in/out times and monthly quota windows are evaluated in this zone.
    # Instants are stored in UTC.
    BUSINESS_TIMEZONE: str = Field(default="Asia/Kolkata", description="Time zone of the office calendar")

    # off: geofence result is recorded only; flag: uncorroborated claims get needs_review;
    # reject: uncorroborated claims fail with LocationNotVerified
    GEOFENCE_ENFORCEMENT: str = Field(
        default="off",
        description="How check-in treats a work location the device position does not corroborate",
    )

    VERSION: Optional[str] = Field(default=None, description="Application version (git SHA or semver)")

    @field_validator("APP_ENV")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate APP_ENV"""
        allowed = ["local", "staging", "prod"]
        if v not in allowed:
            raise ValueError(f"APP_ENV must be one of {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate LOG_LEVEL"""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}")
        return v.upper()

    @field_validator("GEOFENCE_ENFORCEMENT")
    @classmethod
    def validate_geofence_enforcement(cls, v: str) -> str:
        allowed = ["off", "flag", "reject"]
        if v.lower() not in allowed:
            raise ValueError(f"GEOFENCE_ENFORCEMENT must be one of {allowed}")
        return v.lower()

    def validate_production(self) -> None:
        """
        Validate settings for production environment

        Raises:
            ValueError: If production settings are invalid
        """
        if self.APP_ENV == "prod":
            if len(self.JWT_SECRET_KEY) < 32:
                raise ValueError(
                    "JWT_SECRET_KEY must be at least 32 characters in production environment"
                )
            if self.ALLOWED_ORIGINS == "*" or not self.ALLOWED_ORIGINS:
                raise ValueError(
                    "ALLOWED_ORIGINS must be explicitly set (not '*') in production environment"
                )

    def get_allowed_origins_list(self) -> List[str]:
        """
        Get list of allowed CORS origins

        Returns:
            List of allowed origins (or ['*'] for local)
        """
        if self.ALLOWED_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


settings = Settings()

if settings.APP_ENV == "prod":
    settings.validate_production()
