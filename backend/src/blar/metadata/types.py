"""Descriptor types produced by the metadata parser.

These are plain data holders; the registry owns every EntityDescriptor it
builds and nothing mutates one after it is cached.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ForeignKey:
    """A foreign key reference: `fk:<table>` or `fk:<table>.<field>`."""

    table_name: str
    field_name: str = "id"


@dataclass
class ManyToMany:
    """A many-to-many relation through a join table."""

    table_name: str
    field_name: str = "id"


@dataclass
class AggregateDescriptor:
    """A computed value declared with `count:<path>`, `sum:<path>`, etc.

    Attributes:
        name: The field the computed value is assigned to
        kind: Aggregate kind ("count", "sum", or any registered kind)
        path: Dot-separated relation path, e.g. "items.price"
    """

    name: str
    kind: str
    path: str

    @property
    def segments(self) -> list[str]:
        return self.path.split(".")


@dataclass
class FieldDescriptor:
    """Metadata for one dataclass field.

    Attributes:
        name: Attribute name
        type: Resolved annotation (Optional unwrapped)
        path: Structural path from the owning entity (one element for
              top-level fields, more for fields of nested sub-entities)
        nullable: True when the annotation was Optional[...]
        element_type: Element type of a sequence annotation, if any
        list_key: Child column a `list` relation is loaded through
                  (`list:<column>`); None picks the child's foreign key
                  to this entity's table
        stored: False when the storage namespace marks the field "-"
    """

    name: str
    type: Any
    path: tuple[str, ...]
    primary_key: bool = False
    nested: bool = False
    is_list: bool = False
    list_key: str | None = None
    hidden: bool = False
    read_only: bool = False
    foreign_key: ForeignKey | None = None
    many_to_many: ManyToMany | None = None
    nullable: bool = False
    element_type: Any = None
    stored: bool = True


@dataclass
class ColumnDescriptor:
    """A storage column resolved from a field (possibly a nested one)."""

    name: str
    path: tuple[str, ...]
    field: FieldDescriptor


@dataclass
class NestedDescriptor:
    """An embedded sub-entity whose columns are flattened into the parent."""

    name: str
    type: type
    path: tuple[str, ...]
    entity: "EntityDescriptor"


@dataclass
class EntityDescriptor:
    """Normalized metadata for one entity dataclass.

    Attributes:
        type: The dataclass itself (registry cache key)
        name: Logical name (the class name)
        table_name: Explicit `table:` override, else pluralized snake_case
        fields: Field descriptors in declaration order
        primary_key: The first field marked as primary key, or None
        aggregates: Computed values declared on the entity
        nested: Embedded sub-entities
        columns: Storage columns, nested sub-fields flattened
    """

    type: type
    name: str
    table_name: str
    fields: list[FieldDescriptor] = field(default_factory=list)
    primary_key: FieldDescriptor | None = None
    aggregates: list[AggregateDescriptor] = field(default_factory=list)
    nested: list[NestedDescriptor] = field(default_factory=list)
    columns: list[ColumnDescriptor] = field(default_factory=list)

    def get_field(self, name: str) -> FieldDescriptor | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def get_aggregate(self, name: str) -> AggregateDescriptor | None:
        for a in self.aggregates:
            if a.name == name:
                return a
        return None

    def get_nested(self, name: str) -> NestedDescriptor | None:
        for n in self.nested:
            if n.name == name:
                return n
        return None

    def get_column(self, name: str) -> ColumnDescriptor | None:
        for c in self.columns:
            if c.name == name:
                return c
        return None

    @property
    def hidden_fields(self) -> list[str]:
        return [f.name for f in self.fields if f.hidden]

    @property
    def read_only_fields(self) -> list[str]:
        return [f.name for f in self.fields if f.read_only]
