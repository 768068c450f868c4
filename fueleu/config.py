"""
FuelEU Ledger Configuration Module.

Domain-level configuration read from environment variables.
Supports .env files for local development.

Usage:
    from fueleu.config import settings

    print(settings.unknown_fuel_policy)
    print(settings.targets_file)
"""

import os
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional
import logging

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


UNKNOWN_FUEL_POLICIES = ("default", "reject")


@dataclass
class Settings:
    """Domain settings loaded from environment."""

    # Target table override (JSON: {"2025": 89.3368, ...})
    targets_file: Optional[str] = field(default_factory=lambda: os.getenv("FUELEU_TARGETS_FILE"))

    # What to do with a fuel type missing from the LCV table
    unknown_fuel_policy: str = field(
        default_factory=lambda: os.getenv("FUELEU_UNKNOWN_FUEL_POLICY", "default").lower()
    )

    # Logging
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = field(
        default_factory=lambda: os.getenv(
            "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    )

    def __post_init__(self):
        """Validate settings after initialization."""
        if self.unknown_fuel_policy not in UNKNOWN_FUEL_POLICIES:
            logging.warning(
                f"Unknown fuel policy '{self.unknown_fuel_policy}' not one of "
                f"{UNKNOWN_FUEL_POLICIES}, using 'default'"
            )
            self.unknown_fuel_policy = "default"

    @property
    def reject_unknown_fuels(self) -> bool:
        return self.unknown_fuel_policy == "reject"

    def configure_logging(self):
        """Configure logging based on settings."""
        level = getattr(logging, self.log_level.upper(), logging.INFO)
        logging.basicConfig(level=level, format=self.log_format)


# Singleton instance
settings = Settings()
