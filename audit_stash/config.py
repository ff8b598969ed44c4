"""
Application configuration.

All configuration is loaded from environment variables.
Never hardcode secrets or connection strings in code.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Audit Stash"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Database holding the legacy audits / audit_deltas tables
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "postgresql://localhost:5432/audit_stash"
    )

    # Elasticsearch destination
    ELASTIC_URL: str = os.getenv("ELASTIC_URL", "http://localhost:9200")
    # %s is replaced with the -YYYY.MM.DD suffix of each audit
    ELASTIC_INDEX: str = os.getenv("ELASTIC_INDEX", "audits%s")
    ELASTIC_TIMEOUT: float = float(os.getenv("ELASTIC_TIMEOUT", "30"))
    # Only clusters older than 7.x accept _type in bulk actions
    ELASTIC_MAPPING_TYPES: bool = (
        os.getenv("ELASTIC_MAPPING_TYPES", "false").lower() == "true"
    )

    # Import
    IMPORT_BULK_SIZE: int = int(os.getenv("IMPORT_BULK_SIZE", "50"))
    IMPORT_YIELD_PER: int = int(os.getenv("IMPORT_YIELD_PER", "500"))

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    The Settings object is created once and reused, so
    environment variables are only read at first use.
    """
    return Settings()
