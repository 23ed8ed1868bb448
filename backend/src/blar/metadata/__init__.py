"""Entity metadata: tag grammar, descriptors, parser and registry.

Usage:
    from dataclasses import dataclass, field
    from blar.metadata import EntityRegistry, tag

    @dataclass
    class User:
        id: int = field(default=0, metadata=tag("pk"))
        name: str = ""

    registry = EntityRegistry()
    users = registry.parse(User)
    users.table_name        # "users"
    users.primary_key.name  # "id"
"""

from blar.metadata.aggregates import (
    AggregateRegistry,
    aggregate,
    compute_aggregate,
    compute_aggregates,
    register_aggregate,
    resolve_path,
)
from blar.metadata.export import describe_entity
from blar.metadata.parser import build_entity_descriptor, resolve_entity_type
from blar.metadata.registry import EntityRegistry
from blar.metadata.tags import STORAGE_KEY, TAG_KEY, tag
from blar.metadata.types import (
    AggregateDescriptor,
    ColumnDescriptor,
    EntityDescriptor,
    FieldDescriptor,
    ForeignKey,
    ManyToMany,
    NestedDescriptor,
)

__all__ = [
    "AggregateDescriptor",
    "AggregateRegistry",
    "ColumnDescriptor",
    "EntityDescriptor",
    "EntityRegistry",
    "FieldDescriptor",
    "ForeignKey",
    "ManyToMany",
    "NestedDescriptor",
    "STORAGE_KEY",
    "TAG_KEY",
    "aggregate",
    "build_entity_descriptor",
    "compute_aggregate",
    "compute_aggregates",
    "describe_entity",
    "register_aggregate",
    "resolve_entity_type",
    "resolve_path",
    "tag",
]
