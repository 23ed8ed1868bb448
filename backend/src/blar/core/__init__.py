"""Core helpers shared across blar: naming and request context."""

from blar.core.context import Operation, RequestContext
from blar.core.naming import default_table_name, pluralize, resource_name, to_snake_case

__all__ = [
    "Operation",
    "RequestContext",
    "default_table_name",
    "pluralize",
    "resource_name",
    "to_snake_case",
]
