"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts without any configuration.  Business constants that the
circulation rules depend on (loan period, fine rate, reservation limit)
live here as well so that they are documented in exactly one place.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Library API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    # "development" exposes internal error text in 500 responses.
    environment: str = os.getenv("ENVIRONMENT", "development")
    debug: bool = _env_bool("DEBUG")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE")

    host: str = os.getenv("API_HOST", "127.0.0.1")
    port: int = int(os.getenv("API_PORT", "3000"))
    cors_origins: List[str] = field(
        default_factory=lambda: [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    )

    # Circulation rules
    loan_period_days: int = int(os.getenv("LOAN_PERIOD_DAYS", "14"))
    fine_rate_per_day: float = float(os.getenv("FINE_RATE_PER_DAY", "0.50"))
    max_fine: float = float(os.getenv("MAX_FINE", "50"))

    # A member holding this many active (pending, confirmed or queued)
    # reservations cannot place another one.
    max_active_reservations: int = int(os.getenv("MAX_ACTIVE_RESERVATIONS", "3"))
    default_reservation_wait_days: int = int(os.getenv("RESERVATION_WAIT_DAYS", "14"))

    default_page_size: int = int(os.getenv("DEFAULT_PAGE_SIZE", "20"))
    max_page_size: int = int(os.getenv("MAX_PAGE_SIZE", "100"))

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must
# be set before importing this module.
settings = Settings()
