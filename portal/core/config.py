"""
Configuration management for the MYISU portal backend
"""
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import Optional, List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Required settings
    DATABASE_URL: str = Field(..., description="PostgreSQL database URL")
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

    # Campus geofence. Client-reported GPS is trusted as-is.
    CAMPUS_NAME: str = Field(default="MYISU University Campus", description="Display name of the campus")
    CAMPUS_ADDRESS: str = Field(
        default="Al Shaikh Al Nawaoui, Ash Shifa, Riyadh 14721",
        description="Display address of the campus",
    )
    CAMPUS_LATITUDE: float = Field(default=24.552041628310768, ge=-90, le=90)
    CAMPUS_LONGITUDE: float = Field(default=46.684321294327596, ge=-180, le=180)
    CAMPUS_RADIUS_METERS: float = Field(default=500.0, gt=0, description="Allowed check-in radius in meters")

    # Campus and students share one timezone; local wall clock is derived from it
    CAMPUS_TIMEZONE: str = Field(default="Asia/Riyadh", description="IANA timezone of the campus wall clock")

    # start-ontime_until-end per window, comma separated
    CHECKIN_WINDOWS: str = Field(
        default="08:45-09:00-09:15,13:45-14:00-14:15",
        description="Fixed daily check-in windows as HH:MM-HH:MM-HH:MM (start, on-time boundary, end)",
    )
    CHECKIN_WINDOW_STRATEGY: str = Field(
        default="fixed",
        description="fixed = global CHECKIN_WINDOWS; course = per-course attendance windows",
    )
    LOCATION_MAX_AGE_SECONDS: int = Field(
        default=60,
        ge=0,
        description="Readings older than this are treated as timed out (0 disables the check)",
    )

    # Version (can be git SHA or semver)
    VERSION: Optional[str] = Field(default=None, description="Application version (git SHA or semver)")

    # Initial admin bootstrap settings
    INITIAL_ADMIN_EMAIL: str = Field(
        default="admin@myisu.edu.sa",
        description="Email for initial admin user (used when no admin exists)"
    )
    INITIAL_ADMIN_PASSWORD: str = Field(
        default="Admin@12345",
        description="Password for initial admin user (used when no admin exists)"
    )

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

    @field_validator("CHECKIN_WINDOW_STRATEGY")
    @classmethod
    def validate_window_strategy(cls, v: str) -> str:
        allowed = ["fixed", "course"]
        if v.lower() not in allowed:
            raise ValueError(f"CHECKIN_WINDOW_STRATEGY must be one of {allowed}")
        return v.lower()

    @field_validator("CHECKIN_WINDOWS")
    @classmethod
    def validate_checkin_windows(cls, v: str) -> str:
        """Reject malformed window strings at startup rather than at the first check-in"""
        from portal.services.checkin_windows import parse_windows
        parse_windows(v)
        return v

    @field_validator("CAMPUS_TIMEZONE")
    @classmethod
    def validate_campus_timezone(cls, v: str) -> str:
        from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"CAMPUS_TIMEZONE '{v}' is not a known IANA timezone")
        return v

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

    def get_campus_location(self):
        """Campus geofence built from CAMPUS_* settings"""
        from portal.utils.geo import CampusLocation, GeoPoint
        return CampusLocation(
            point=GeoPoint(self.CAMPUS_LATITUDE, self.CAMPUS_LONGITUDE),
            allowed_radius_meters=self.CAMPUS_RADIUS_METERS,
            name=self.CAMPUS_NAME,
            address=self.CAMPUS_ADDRESS,
        )

    def get_checkin_windows(self):
        """Fixed check-in windows parsed from CHECKIN_WINDOWS"""
        from portal.services.checkin_windows import parse_windows
        return parse_windows(self.CHECKIN_WINDOWS)


# Create settings instance
settings = Settings()

# Validate production settings if in prod
if settings.APP_ENV == "prod":
    settings.validate_production()
