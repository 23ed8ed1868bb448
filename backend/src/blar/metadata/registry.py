"""Entity registry: a cache of parsed EntityDescriptors keyed by class."""

import logging
import threading
from typing import Any

from blar.errors import ParseError
from blar.metadata.parser import build_entity_descriptor, resolve_entity_type
from blar.metadata.types import EntityDescriptor

logger = logging.getLogger(__name__)


class EntityRegistry:
    """Parses entity dataclasses and caches the result per class.

    Construct one at startup and hand it to every repository and router
    that needs entity metadata. Parsing the same class twice returns the
    same EntityDescriptor instance until clear() is called.

    Cached lookups take no lock. Misses are re-checked and built under a
    re-entrant lock, so concurrent first parses of one class still cache
    exactly one descriptor, and nested sub-entities can be parsed while
    the lock is held. A class that embeds itself, directly or through
    another nested sub-entity, cannot be flattened into columns and fails
    with ParseError.

    Example:
        registry = EntityRegistry()
        descriptor = registry.parse(User)
        assert registry.parse(User()) is descriptor
    """

    def __init__(self) -> None:
        self._entities: dict[type, EntityDescriptor] = {}
        self._lock = threading.RLock()
        self._building: set[type] = set()

    def parse(self, entity: Any) -> EntityDescriptor:
        """Return the descriptor for a dataclass or dataclass instance.

        Raises:
            ParseError: If entity is not a dataclass or an instance of one,
                        or if it embeds itself through nested fields
        """
        cls = resolve_entity_type(entity)

        descriptor = self._entities.get(cls)
        if descriptor is not None:
            return descriptor

        with self._lock:
            descriptor = self._entities.get(cls)
            if descriptor is None:
                if cls in self._building:
                    raise ParseError(f"recursive nested entity {cls.__name__}")
                self._building.add(cls)
                try:
                    descriptor = build_entity_descriptor(cls, self.parse)
                finally:
                    self._building.discard(cls)
                self._entities[cls] = descriptor
                logger.debug(
                    "Parsed entity %s (table %s, %d fields)",
                    descriptor.name,
                    descriptor.table_name,
                    len(descriptor.fields),
                )
        return descriptor

    def get(self, name: str) -> EntityDescriptor | None:
        """Look up a cached descriptor by logical name."""
        for descriptor in list(self._entities.values()):
            if descriptor.name == name:
                return descriptor
        return None

    def list_entities(self) -> list[str]:
        """Names of all cached entities, sorted."""
        return sorted(d.name for d in list(self._entities.values()))

    def clear(self) -> None:
        """Discard every cached descriptor. Primarily for testing."""
        with self._lock:
            self._entities = {}

    def __contains__(self, entity: Any) -> bool:
        cls = entity if isinstance(entity, type) else type(entity)
        return cls in self._entities

    def __len__(self) -> int:
        return len(self._entities)
