"""
Application configuration.

All configuration is loaded from environment variables.
Business defaults (share percentages, installment terms) live in
the system_configuration table, not here.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Trip Ledger"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "postgresql://localhost:5432/trip_ledger"
    )

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Actor recorded when a request carries no X-User-Id header
    SYSTEM_ACTOR: str = os.getenv("SYSTEM_ACTOR", "system")

    # Upstream systems
    HR_EMPLOYEES_URL: str = os.getenv("HR_EMPLOYEES_URL", "")
    HR_PAYROLL_URL: str = os.getenv("HR_PAYROLL_URL", "")
    INVENTORY_BUSES_URL: str = os.getenv("INVENTORY_BUSES_URL", "")
    OPERATIONS_RENTALS_URL: str = os.getenv("OPERATIONS_RENTALS_URL", "")
    OPERATIONS_TRIPS_URL: str = os.getenv("OPERATIONS_TRIPS_URL", "")

    # Audit log sink. Empty URL disables audit shipping.
    AUDIT_LOGS_URL: str = os.getenv("AUDIT_LOGS_URL", "")
    AUDIT_LOGS_API_KEY: str = os.getenv("AUDIT_LOGS_API_KEY", "")

    # Outbound fetch tuning
    SYNC_TIMEOUT_SECONDS: float = float(os.getenv("SYNC_TIMEOUT_SECONDS", "30"))
    SYNC_MAX_RETRIES: int = int(os.getenv("SYNC_MAX_RETRIES", "3"))
    SYNC_BACKOFF_BASE_SECONDS: float = float(
        os.getenv("SYNC_BACKOFF_BASE_SECONDS", "1.0")
    )
    SYNC_BACKOFF_MAX_SECONDS: float = float(
        os.getenv("SYNC_BACKOFF_MAX_SECONDS", "10.0")
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    The Settings object is created once and reused for all
    subsequent calls.
    """
    return Settings()
