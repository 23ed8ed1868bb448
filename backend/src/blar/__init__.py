"""blar: entity registry, generic repository, lifecycle hooks and REST routes
generated from annotated dataclasses.

Usage:
    from dataclasses import dataclass, field
    import blar

    @dataclass
    class Product:
        id: int = field(default=0, metadata=blar.tag("pk"))
        name: str = ""
        price: float = 0.0

    blar.run(Product)
"""

from blar.api import App, AppConfig, run
from blar.core import Operation, RequestContext, to_snake_case
from blar.errors import (
    BlarError,
    HookError,
    MissingPrimaryKey,
    NoStorageConfigured,
    NotFound,
    OperationCancelled,
    ParseError,
)
from blar.hooks import (
    AfterCreate,
    AfterDelete,
    AfterUpdate,
    BeforeCreate,
    BeforeDelete,
    BeforeUpdate,
    HookDispatcher,
)
from blar.metadata import EntityDescriptor, EntityRegistry, FieldDescriptor, tag
from blar.persistence import DatabaseConfig, Repository, StorageDriver, create_driver

__version__ = "0.1.0"

__all__ = [
    "AfterCreate",
    "AfterDelete",
    "AfterUpdate",
    "App",
    "AppConfig",
    "BeforeCreate",
    "BeforeDelete",
    "BeforeUpdate",
    "BlarError",
    "DatabaseConfig",
    "EntityDescriptor",
    "EntityRegistry",
    "FieldDescriptor",
    "HookDispatcher",
    "HookError",
    "MissingPrimaryKey",
    "NoStorageConfigured",
    "NotFound",
    "Operation",
    "OperationCancelled",
    "ParseError",
    "Repository",
    "RequestContext",
    "StorageDriver",
    "create_driver",
    "run",
    "tag",
    "to_snake_case",
]
