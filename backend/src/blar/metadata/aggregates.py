"""Aggregate computation for `count:` / `sum:` style field tags.

Aggregates are evaluated lazily, in memory, after an entity and its
`list` relations have been loaded: the aggregate's dot path is walked over
the object graph, sequences are flattened, None values are skipped and the
collected values are reduced by the aggregate function.
"""

from collections.abc import Callable, Iterable
from typing import Any

from blar.metadata.types import AggregateDescriptor

# Aggregate function signature: (values reached by the path) -> result
AggregateFn = Callable[[list[Any]], Any]


class AggregateRegistry:
    """Registry of aggregate kinds usable as tag prefixes.

    Example:
        @aggregate("max")
        def max_of(values):
            return max(values, default=None)
    """

    _functions: dict[str, AggregateFn] = {}

    @classmethod
    def register(cls, kind: str, fn: AggregateFn) -> None:
        """Register an aggregate function. Re-registering a kind replaces it."""
        cls._functions[kind] = fn

    @classmethod
    def unregister(cls, kind: str) -> None:
        cls._functions.pop(kind, None)

    @classmethod
    def get(cls, kind: str) -> AggregateFn:
        if kind not in cls._functions:
            raise ValueError(f"Aggregate kind '{kind}' is not registered")
        return cls._functions[kind]

    @classmethod
    def is_registered(cls, kind: str) -> bool:
        return kind in cls._functions

    @classmethod
    def list_registered(cls) -> list[str]:
        return sorted(cls._functions.keys())


def register_aggregate(kind: str, fn: AggregateFn) -> None:
    """Make `kind` usable as an aggregate tag prefix (`<kind>:<path>`)."""
    AggregateRegistry.register(kind, fn)


def aggregate(kind: str) -> Callable[[AggregateFn], AggregateFn]:
    """Decorator to register an aggregate function."""

    def decorator(fn: AggregateFn) -> AggregateFn:
        register_aggregate(kind, fn)
        return fn

    return decorator


@aggregate("count")
def count_values(values: list[Any]) -> int:
    return len(values)


@aggregate("sum")
def sum_values(values: list[Any]) -> Any:
    return sum(values, 0)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Iterable) and not isinstance(value, (str, bytes, dict))


def resolve_path(obj: Any, path: str) -> list[Any]:
    """Collect every value reachable from obj along a dot-separated path.

    Sequences met along the way are flattened, so "items.price" on an
    object with a list of items yields one price per item. Missing
    attributes and None values are dropped.
    """
    current = [obj]
    for segment in path.split("."):
        reached: list[Any] = []
        for item in current:
            value = getattr(item, segment, None)
            if value is None:
                continue
            if _is_sequence(value):
                reached.extend(v for v in value if v is not None)
            else:
                reached.append(value)
        current = reached
    return current


def compute_aggregate(instance: Any, descriptor: AggregateDescriptor) -> Any:
    """Evaluate one aggregate against a loaded entity instance."""
    fn = AggregateRegistry.get(descriptor.kind)
    return fn(resolve_path(instance, descriptor.path))


def compute_aggregates(instance: Any, aggregates: list[AggregateDescriptor]) -> None:
    """Evaluate every aggregate and assign the result to its field."""
    for descriptor in aggregates:
        setattr(instance, descriptor.name, compute_aggregate(instance, descriptor))
