"""Where blar stores entity tables, and the driver that talks to it."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from blar.persistence.driver import StorageDriver


@dataclass
class DatabaseConfig:
    """Database URL for registered entities.

    Only SQLite and PostgreSQL URLs can be turned into a driver.
    """

    url: str

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> DatabaseConfig:
        """Pick the database URL from the environment.

        DATABASE_URL wins. Otherwise BLAR_DB_PATH names a SQLite file.
        Without either, the file is data/blar.db under base_path, or
        blar.db in the working directory when no base_path is given.
        """
        url = os.environ.get("DATABASE_URL")
        if url:
            return cls(url=url)
        db_path = os.environ.get("BLAR_DB_PATH")
        if db_path:
            return cls(url=f"sqlite:///{db_path}")
        db_file = base_path / "data" / "blar.db" if base_path else Path("blar.db")
        return cls(url=f"sqlite:///{db_file}")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_postgresql(self) -> bool:
        return self.url.startswith("postgresql")

    @property
    def sqlalchemy_url(self) -> str:
        """The URL handed to SQLAlchemy; bare postgresql:// selects psycopg 3."""
        scheme, sep, rest = self.url.partition("://")
        if scheme == "postgresql":
            return f"postgresql+psycopg{sep}{rest}"
        return self.url


def create_driver(config: DatabaseConfig) -> StorageDriver:
    """Create a storage driver based on the database URL scheme.

    Args:
        config: Database configuration with URL.

    Returns:
        A StorageDriver instance (not yet connected).

    Raises:
        ValueError: For unsupported URL schemes.
    """
    if config.is_sqlite or config.is_postgresql:
        from blar.persistence.sqlalchemy_driver import SQLAlchemyDriver

        if config.is_sqlite:
            # Make sure the directory for a file database exists
            db_path = config.url.replace("sqlite:///", "", 1)
            if db_path and db_path != config.url and ":memory:" not in db_path:
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        return SQLAlchemyDriver(config.sqlalchemy_url)

    raise ValueError(f"Unsupported database URL scheme: {config.url}")
