"""Persistence layer - storage drivers and the generic repository."""

from blar.persistence.config import DatabaseConfig, create_driver
from blar.persistence.driver import StorageDriver
from blar.persistence.mapping import entity_to_row, row_to_entity
from blar.persistence.repository import Repository

__all__ = [
    "DatabaseConfig",
    "Repository",
    "StorageDriver",
    "create_driver",
    "entity_to_row",
    "row_to_entity",
]
