"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
service starts with a local SQLite file and console logging.  In a
production deployment you should override these via environment
variables.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Library Circulation API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Optional path of a log file.  Empty means console logging only.
    log_file: str = os.getenv("LOG_FILE", "")

    # Path to the SQLite database file.  A relative path is resolved
    # against the project root by ``core.db``.
    database_url: str = os.getenv("DATABASE_URL", "library.db")

    # Seconds a connection waits for a competing writer to release the
    # database before giving up with ``database is locked``.
    database_timeout: float = float(os.getenv("DATABASE_TIMEOUT", "5"))

    # Bind address used by ``run.py``.
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "5000"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables must
# be set before importing this module.
settings = Settings()
