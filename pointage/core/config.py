"""
Configuration management for Pointage QR Backend
"""
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import Optional, List
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Required settings
    DATABASE_URL: str = Field(..., description="Database URL (sqlite:///./pointage.db, postgresql://...)")
    JWT_SECRET_KEY: str = Field(..., description="JWT secret key for token signing")

    # Optional settings with defaults
    JWT_ALGORITHM: str = Field(default="HS256", description="JWT algorithm")
    JWT_EXPIRE_MINUTES: int = Field(default=120, description="JWT token expiration in minutes")

    APP_ENV: str = Field(default="local", description="Application environment: local, staging, prod")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level: DEBUG, INFO, WARNING, ERROR")

    # CORS settings
    ALLOWED_ORIGINS: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins. Use '*' for local only."
    )

    # Work date is the calendar day in this zone; timestamps are stored in UTC
    WORK_TZ: str = Field(default="Africa/Abidjan", description="Time zone used to derive the work date")

    # QR payload accepted by the mobile scanner (marker variant)
    QR_MARKER: str = Field(default="Tevia Energie Pass Ok", description="Expected QR marker text")

    # Geofence: axis-aligned box around the site, in degrees
    GEOFENCE_ENABLED: bool = Field(default=True, description="Require a position inside the zone before scanning")
    GEOFENCE_TARGET_LAT: float = Field(default=6.8467473, ge=-90, le=90, description="Site latitude")
    GEOFENCE_TARGET_LON: float = Field(default=-5.2840243, ge=-180, le=180, description="Site longitude")
    GEOFENCE_TOLERANCE_DEG: float = Field(default=0.0002, gt=0, description="Half-width of the box (~20m)")

    # Only accounts of this e-mail domain may log in (empty = any domain)
    COMPANY_EMAIL_DOMAIN: str = Field(default="", description="Allowed e-mail domain, e.g. example.com")

    # Store timeout: sqlite busy timeout / postgres statement_timeout
    STORE_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0, description="Timeout for a single store call")

    # Version (can be git SHA or semver)
    VERSION: Optional[str] = Field(default=None, description="Application version (git SHA or semver)")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

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

    @field_validator("WORK_TZ")
    @classmethod
    def validate_tz(cls, v: str) -> str:
        """Validate WORK_TZ is a known IANA zone"""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"WORK_TZ must be a valid IANA time zone, got {v!r}")
        return v

    @field_validator("COMPANY_EMAIL_DOMAIN")
    @classmethod
    def normalize_domain(cls, v: str) -> str:
        return v.strip().lstrip("@").lower()

    def validate_production(self) -> None:
        """
        Validate settings for production environment

        Raises:
            ValueError: If production settings are invalid
        """
        if self.APP_ENV == "prod":
            # JWT_SECRET_KEY must be at least 32 characters in production
            if len(self.JWT_SECRET_KEY) < 32:
                raise ValueError(
                    "JWT_SECRET_KEY must be at least 32 characters in production environment"
                )

            # ALLOWED_ORIGINS must not be wildcard in production
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

    @property
    def zone(self) -> ZoneInfo:
        """Work-date time zone"""
        return ZoneInfo(self.WORK_TZ)


# Create settings instance
settings = Settings()

# Validate production settings if in prod
if settings.APP_ENV == "prod":
    settings.validate_production()
