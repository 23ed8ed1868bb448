"""StorageDriver Protocol: the interface every storage backend implements."""

from contextlib import AbstractContextManager
from typing import Any, Protocol, runtime_checkable

from blar.core.context import RequestContext
from blar.metadata.types import EntityDescriptor


@runtime_checkable
class StorageDriver(Protocol):
    """Interface the repository delegates storage to.

    Rows are plain dicts keyed by column name. `fetch` returns None when
    no row matches; that is the driver's not-found signal. Every operation
    accepts an optional RequestContext and must refuse to run once it is
    cancelled or expired.
    """

    def connect(self) -> None: ...

    def close(self) -> None: ...

    def initialize_entity(self, entity: EntityDescriptor) -> None: ...

    def transaction(self) -> AbstractContextManager[Any]: ...

    def insert(
        self,
        entity: EntityDescriptor,
        values: dict[str, Any],
        ctx: RequestContext | None = None,
    ) -> Any: ...

    def fetch(
        self, entity: EntityDescriptor, id: Any, ctx: RequestContext | None = None
    ) -> dict[str, Any] | None: ...

    def fetch_all(
        self, entity: EntityDescriptor, ctx: RequestContext | None = None
    ) -> list[dict[str, Any]]: ...

    def fetch_where(
        self,
        entity: EntityDescriptor,
        column: str,
        value: Any,
        ctx: RequestContext | None = None,
    ) -> list[dict[str, Any]]: ...

    def save(
        self,
        entity: EntityDescriptor,
        id: Any,
        values: dict[str, Any],
        ctx: RequestContext | None = None,
    ) -> int: ...

    def remove(
        self, entity: EntityDescriptor, id: Any, ctx: RequestContext | None = None
    ) -> int: ...

    def count(
        self, entity: EntityDescriptor, ctx: RequestContext | None = None
    ) -> int: ...
