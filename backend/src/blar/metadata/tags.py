"""Field annotation grammar.

Two independent namespaces are read from `dataclasses.field(metadata=...)`:

- "blar": semicolon-separated fragments
    pk, nested, list, list:<child column>, hidden, readonly,
    fk:<table>[.<field>], m2m:<table>[.<field>],
    <aggregate kind>:<path>   (count, sum, or any registered kind)
- "storage": storage mapping fragments
    primaryKey, table:<name> (class level), "-" (not stored)

Unrecognized fragments are ignored.

Usage:
    @dataclass
    class Product:
        id: int = field(default=0, metadata=tag("pk", storage="primaryKey"))
        secret: str = field(default="", metadata=tag("hidden"))
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from blar.metadata.aggregates import AggregateRegistry
from blar.metadata.types import ForeignKey, ManyToMany

TAG_KEY = "blar"
STORAGE_KEY = "storage"
TABLE_ATTRIBUTE = "__storage__"


def tag(fragments: str = "", storage: str = "") -> dict[str, str]:
    """Build the field metadata mapping for a dataclass field."""
    metadata: dict[str, str] = {}
    if fragments:
        metadata[TAG_KEY] = fragments
    if storage:
        metadata[STORAGE_KEY] = storage
    return metadata


@dataclass
class FieldTags:
    """Result of parsing the "blar" namespace of one field."""

    primary_key: bool = False
    nested: bool = False
    is_list: bool = False
    list_key: str | None = None
    hidden: bool = False
    read_only: bool = False
    foreign_key: ForeignKey | None = None
    many_to_many: ManyToMany | None = None
    aggregates: list[tuple[str, str]] = field(default_factory=list)


def split_fragments(value: str) -> list[str]:
    """Split a tag string on semicolons, dropping blanks."""
    return [part.strip() for part in value.split(";") if part.strip()]


def _table_and_field(value: str) -> tuple[str, str]:
    table, _, target = value.partition(".")
    return table, target or "id"


def parse_field_tags(value: str) -> FieldTags:
    """Parse a "blar" tag string."""
    tags = FieldTags()
    for part in split_fragments(value):
        if part == "pk":
            tags.primary_key = True
        elif part == "nested":
            tags.nested = True
        elif part == "list" or part.startswith("list:"):
            tags.is_list = True
            tags.list_key = part[len("list:"):] or None
        elif part == "hidden":
            tags.hidden = True
        elif part == "readonly":
            tags.read_only = True
        elif part.startswith("fk:"):
            tags.foreign_key = ForeignKey(*_table_and_field(part[3:]))
        elif part.startswith("m2m:"):
            tags.many_to_many = ManyToMany(*_table_and_field(part[4:]))
        elif ":" in part:
            kind, _, path = part.partition(":")
            if AggregateRegistry.is_registered(kind) and path:
                tags.aggregates.append((kind, path))
    return tags


def parse_storage_tags(value: str) -> set[str]:
    """Parse a storage tag string into its set of fragments."""
    return set(split_fragments(value))


def storage_table_name(value: str) -> str | None:
    """Extract the `table:<name>` override from a storage tag string."""
    for part in split_fragments(value):
        if part.startswith("table:"):
            return part[len("table:"):] or None
    return None


def field_metadata(metadata: Mapping[str, Any]) -> tuple[str, str]:
    """Return the (blar, storage) tag strings of a dataclass field."""
    return str(metadata.get(TAG_KEY, "")), str(metadata.get(STORAGE_KEY, ""))
