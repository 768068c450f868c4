"""
Configuration management for the FuelEU Ledger API.
Loads environment variables and provides typed configuration.
"""
from typing import List
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ========================================================================
    # Database Configuration
    # ========================================================================
    database_url: str = "sqlite:///./fueleu.db"
    db_echo: bool = False
    db_pool_size: int = 10
    db_max_overflow: int = 20

    # ========================================================================
    # API Configuration
    # ========================================================================
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # ========================================================================
    # CORS Configuration
    # ========================================================================
    cors_origins: str = "http://localhost:3000,http://localhost:5173"
    cors_credentials: bool = True

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    # ========================================================================
    # Rate Limiting
    # ========================================================================
    rate_limit_enabled: bool = True
    rate_limit_per_minute: int = 60

    # ========================================================================
    # Application Configuration
    # ========================================================================
    environment: str = "development"
    log_level: str = "info"
    debug: bool = False  # echo exception text in 500 bodies

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment.lower() == "development"

    # ========================================================================
    # Pydantic Settings Configuration
    # ========================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application settings
    """
    return Settings()


# Convenience exports
settings = get_settings()

# Validate critical settings in production
if settings.is_production:
    if settings.database_url.startswith("sqlite"):
        raise ValueError(
            "DATABASE_URL must point to a server database in production!"
        )

    if "localhost" in settings.cors_origins.lower():
        raise ValueError(
            "CORS_ORIGINS must not include localhost in production!"
        )

    if settings.debug:
        raise ValueError(
            "DEBUG must be off in production!"
        )
