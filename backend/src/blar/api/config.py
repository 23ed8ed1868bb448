"""Application configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from blar.persistence.config import DatabaseConfig


@dataclass
class AppConfig:
    """Server and database settings.

    Attributes:
        host: Interface to bind (BLAR_HOST)
        port: Port to listen on (BLAR_PORT)
        log_level: uvicorn log level (BLAR_LOG_LEVEL)
        title: OpenAPI title of the generated application
        database: Storage configuration
    """

    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "info"
    title: str = "blar API"
    database: DatabaseConfig = field(
        default_factory=lambda: DatabaseConfig(url="sqlite:///blar.db")
    )

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> AppConfig:
        """Create config from BLAR_* environment variables."""
        return cls(
            host=os.environ.get("BLAR_HOST", "127.0.0.1"),
            port=int(os.environ.get("BLAR_PORT", "8080")),
            log_level=os.environ.get("BLAR_LOG_LEVEL", "info"),
            database=DatabaseConfig.from_env(base_path),
        )
