"""Plain-dict export of entity descriptors (metadata endpoints, CLI)."""

from typing import Any

from blar.metadata.types import EntityDescriptor, FieldDescriptor


def _type_name(tp: Any) -> str:
    if tp is None:
        return "any"
    return getattr(tp, "__name__", None) or str(tp)


def describe_field(field: FieldDescriptor) -> dict[str, Any]:
    return {
        "name": field.name,
        "type": _type_name(field.type),
        "path": ".".join(field.path),
        "primaryKey": field.primary_key,
        "nested": field.nested,
        "list": field.is_list,
        "listKey": field.list_key,
        "hidden": field.hidden,
        "readOnly": field.read_only,
        "nullable": field.nullable,
        "foreignKey": {
            "table": field.foreign_key.table_name,
            "field": field.foreign_key.field_name,
        } if field.foreign_key else None,
        "manyToMany": {
            "table": field.many_to_many.table_name,
            "field": field.many_to_many.field_name,
        } if field.many_to_many else None,
    }


def describe_entity(entity: EntityDescriptor) -> dict[str, Any]:
    """Export an EntityDescriptor as JSON/YAML-friendly data."""
    return {
        "entity": entity.name,
        "table": entity.table_name,
        "primaryKey": entity.primary_key.name if entity.primary_key else None,
        "fields": [describe_field(f) for f in entity.fields],
        "columns": [c.name for c in entity.columns],
        "aggregates": [
            {"name": a.name, "kind": a.kind, "path": a.path}
            for a in entity.aggregates
        ],
        "nested": [
            {"name": n.name, "entity": n.entity.name} for n in entity.nested
        ],
    }
