"""Conversion between entity instances and storage rows."""

import dataclasses
from collections.abc import Mapping
from typing import Any

from blar.metadata.types import EntityDescriptor


def entity_to_row(entity: EntityDescriptor, instance: Any) -> dict[str, Any]:
    """Flatten an instance into {column: value}, nested sub-entities included."""
    row: dict[str, Any] = {}
    for column in entity.columns:
        value = instance
        for segment in column.path:
            value = getattr(value, segment, None)
            if value is None:
                break
        row[column.name] = value
    return row


def row_to_entity(entity: EntityDescriptor, row: Mapping[str, Any]) -> Any:
    """Build an instance of the entity dataclass from a storage row.

    Fields without a column (lists, aggregates, unstored fields) keep their
    dataclass defaults.
    """
    values: dict[str, Any] = {}
    for column in entity.columns:
        if column.name not in row:
            continue
        node = values
        for segment in column.path[:-1]:
            node = node.setdefault(segment, {})
        node[column.path[-1]] = row[column.name]
    return _build(entity, values)


def _build(entity: EntityDescriptor, values: dict[str, Any]) -> Any:
    init_args: dict[str, Any] = {}
    late: dict[str, Any] = {}
    init_names = {f.name for f in dataclasses.fields(entity.type) if f.init}

    for name, value in values.items():
        nested = entity.get_nested(name)
        if nested is not None:
            field = entity.get_field(name)
            if field is not None and field.nullable and all(
                v is None for v in _leaves(value)
            ):
                value = None
            else:
                value = _build(nested.entity, value)
        if name in init_names:
            init_args[name] = value
        else:
            late[name] = value

    instance = entity.type(**init_args)
    for name, value in late.items():
        setattr(instance, name, value)
    return instance


def _leaves(values: dict[str, Any]) -> list[Any]:
    leaves: list[Any] = []
    for value in values.values():
        if isinstance(value, dict):
            leaves.extend(_leaves(value))
        else:
            leaves.append(value)
    return leaves
