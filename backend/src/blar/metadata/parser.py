"""Build EntityDescriptors from dataclass declarations."""

import dataclasses
import types
import typing
from collections.abc import Callable, Sequence
from typing import Any, Union, get_args, get_origin

from blar.core.naming import default_table_name
from blar.errors import ParseError
from blar.metadata.tags import (
    TABLE_ATTRIBUTE,
    field_metadata,
    parse_field_tags,
    parse_storage_tags,
    storage_table_name,
)
from blar.metadata.types import (
    AggregateDescriptor,
    ColumnDescriptor,
    EntityDescriptor,
    FieldDescriptor,
    NestedDescriptor,
)

_SEQUENCE_ORIGINS = (list, tuple, set, frozenset, Sequence)


def resolve_entity_type(entity: Any) -> type:
    """Resolve a dataclass or dataclass instance to the dataclass itself.

    Raises:
        ParseError: If the value is not a dataclass or an instance of one
    """
    if entity is None:
        raise ParseError("cannot parse None as an entity")
    cls = entity if isinstance(entity, type) else type(entity)
    if not dataclasses.is_dataclass(cls):
        raise ParseError(f"{cls.__name__} is not a dataclass entity")
    return cls


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        # Unresolvable forward references: fall back to raw annotations
        return {}


def _unwrap_optional(tp: Any) -> tuple[Any, bool]:
    origin = get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = get_args(tp)
        rest = [a for a in args if a is not type(None)]
        if len(rest) == 1 and len(args) == 2:
            return rest[0], True
    return tp, False


def _element_type(tp: Any) -> Any:
    origin = get_origin(tp)
    if origin in _SEQUENCE_ORIGINS:
        args = get_args(tp)
        return args[0] if args else None
    return None


def _is_dataclass_type(tp: Any) -> bool:
    return isinstance(tp, type) and dataclasses.is_dataclass(tp)


def build_entity_descriptor(
    cls: type,
    parse_nested: Callable[[type], EntityDescriptor],
) -> EntityDescriptor:
    """Parse a dataclass into an EntityDescriptor.

    Args:
        cls: The entity dataclass
        parse_nested: Resolves embedded sub-entity dataclasses, normally
                      the owning registry's parse

    Fields whose names start with an underscore are skipped. The first
    field marked as primary key wins.
    """
    entity = EntityDescriptor(
        type=cls,
        name=cls.__name__,
        table_name=default_table_name(cls.__name__),
    )

    override = storage_table_name(str(getattr(cls, TABLE_ATTRIBUTE, "") or ""))
    if override:
        entity.table_name = override

    hints = _type_hints(cls)
    for f in dataclasses.fields(cls):
        if f.name.startswith("_"):
            continue

        blar_tag, storage_tag = field_metadata(f.metadata)
        tags = parse_field_tags(blar_tag)
        storage = parse_storage_tags(storage_tag)
        field_type, nullable = _unwrap_optional(hints.get(f.name, f.type))

        fd = FieldDescriptor(
            name=f.name,
            type=field_type,
            path=(f.name,),
            primary_key=tags.primary_key or "primaryKey" in storage,
            nested=tags.nested,
            is_list=tags.is_list,
            list_key=tags.list_key,
            hidden=tags.hidden,
            read_only=tags.read_only,
            foreign_key=tags.foreign_key,
            many_to_many=tags.many_to_many,
            nullable=nullable,
            element_type=_element_type(field_type),
            stored="-" not in storage,
        )
        entity.fields.append(fd)

        if fd.primary_key and entity.primary_key is None:
            entity.primary_key = fd

        for kind, path in tags.aggregates:
            entity.aggregates.append(AggregateDescriptor(name=f.name, kind=kind, path=path))

        if fd.nested and _is_dataclass_type(field_type):
            entity.nested.append(
                NestedDescriptor(
                    name=f.name,
                    type=field_type,
                    path=fd.path,
                    entity=parse_nested(field_type),
                )
            )

    entity.columns = _resolve_columns(entity)
    return entity


def _resolve_columns(entity: EntityDescriptor) -> list[ColumnDescriptor]:
    """Storage columns: scalar fields plus flattened nested sub-fields."""
    computed = {a.name for a in entity.aggregates}
    columns: list[ColumnDescriptor] = []
    for fd in entity.fields:
        if not fd.stored or fd.is_list or fd.many_to_many or fd.name in computed:
            continue
        nested = entity.get_nested(fd.name)
        if nested is not None:
            for col in nested.entity.columns:
                columns.append(
                    ColumnDescriptor(
                        name=f"{fd.name}_{col.name}",
                        path=fd.path + col.path,
                        field=col.field,
                    )
                )
            continue
        columns.append(ColumnDescriptor(name=fd.name, path=fd.path, field=fd))
    return columns
