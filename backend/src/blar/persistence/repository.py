"""Generic CRUD repository over one entity type."""

import dataclasses
from contextlib import AbstractContextManager
from typing import Any, Generic, TypeVar

from blar.core.context import RequestContext
from blar.errors import MissingPrimaryKey, NoStorageConfigured, NotFound
from blar.metadata.aggregates import compute_aggregates
from blar.metadata.registry import EntityRegistry
from blar.metadata.types import ColumnDescriptor, EntityDescriptor, FieldDescriptor
from blar.persistence.driver import StorageDriver
from blar.persistence.mapping import entity_to_row, row_to_entity

T = TypeVar("T")


class Repository(Generic[T]):
    """Type-safe CRUD access to one entity, delegating to a StorageDriver.

    No caching, retries or backoff: every call goes straight to the driver.
    Reads hydrate `list` relations (when a registry is given) and compute
    the entity's aggregates.

    Example:
        users: Repository[User] = Repository(driver, registry.parse(User), registry)
        user = users.create(User(name="Ada"))
        users.get_by_id(user.id)
    """

    def __init__(
        self,
        driver: StorageDriver | None,
        entity: EntityDescriptor,
        registry: EntityRegistry | None = None,
    ):
        self.driver = driver
        self.entity = entity
        self.registry = registry

    def _require_driver(self) -> StorageDriver:
        if self.driver is None:
            raise NoStorageConfigured()
        return self.driver

    def _require_pk(self) -> FieldDescriptor:
        if self.entity.primary_key is None:
            raise MissingPrimaryKey(self.entity.name)
        return self.entity.primary_key

    def transaction(self) -> AbstractContextManager[Any]:
        """Open a driver transaction; its handle is what hooks receive."""
        return self._require_driver().transaction()

    def create(self, instance: T, ctx: RequestContext | None = None) -> T:
        """Persist a new entity and assign its generated primary key."""
        driver = self._require_driver()
        pk_value = driver.insert(self.entity, entity_to_row(self.entity, instance), ctx)
        if self.entity.primary_key is not None:
            setattr(instance, self.entity.primary_key.name, pk_value)
        return instance

    def get_by_id(self, id: Any, ctx: RequestContext | None = None) -> T:
        """Fetch one entity by primary key.

        Raises:
            NotFound: If no row has that key
        """
        driver = self._require_driver()
        self._require_pk()
        row = driver.fetch(self.entity, id, ctx)
        if row is None:
            raise NotFound(self.entity.name, id)
        return self._materialize(row, ctx)

    def get_all(self, ctx: RequestContext | None = None) -> list[T]:
        """Fetch every entity, in whatever order the driver returns them."""
        driver = self._require_driver()
        return [self._materialize(row, ctx) for row in driver.fetch_all(self.entity, ctx)]

    def update(self, instance: T, ctx: RequestContext | None = None) -> T:
        """Persist the full state of an entity, keyed by its primary key.

        Raises:
            NotFound: If no row has the instance's key
        """
        driver = self._require_driver()
        pk = self._require_pk()
        id = getattr(instance, pk.name)
        if driver.save(self.entity, id, entity_to_row(self.entity, instance), ctx) == 0:
            raise NotFound(self.entity.name, id)
        return instance

    def delete(self, id: Any, ctx: RequestContext | None = None) -> bool:
        """Delete by primary key.

        Deleting a missing id is not an error.

        Returns:
            True if a row was removed
        """
        driver = self._require_driver()
        self._require_pk()
        return driver.remove(self.entity, id, ctx) > 0

    def count(self, ctx: RequestContext | None = None) -> int:
        return self._require_driver().count(self.entity, ctx)

    def _materialize(
        self,
        row: dict[str, Any],
        ctx: RequestContext | None,
        loading: frozenset[tuple[str, Any]] = frozenset(),
    ) -> T:
        instance = row_to_entity(self.entity, row)
        self._hydrate(instance, ctx, loading)
        compute_aggregates(instance, self.entity.aggregates)
        return instance

    def _hydrate(
        self,
        instance: Any,
        ctx: RequestContext | None,
        loading: frozenset[tuple[str, Any]],
    ) -> None:
        """Load `list` relations through the child's foreign key column.

        The child column is the one named by `list:<column>`, else the
        first child column with an fk to this table. It is matched against
        the parent column the fk targets (the primary key by default).
        Rows already being loaded higher up, keyed by (table, primary key),
        are skipped so self-referencing and cyclic data terminate.
        """
        pk = self.entity.primary_key
        if self.registry is None or pk is None or self.driver is None:
            return

        loading = loading | {(self.entity.table_name, getattr(instance, pk.name))}
        for field in self.entity.fields:
            if not field.is_list or not _is_dataclass_type(field.element_type):
                continue
            child = self.registry.parse(field.element_type)
            fk_column = _foreign_key_column(child, self.entity.table_name, field.list_key)
            if fk_column is None:
                continue

            fk = fk_column.field.foreign_key
            target = self.entity.get_column(fk.field_name if fk else pk.name)
            value = _column_value(instance, target.path) if target else None
            if value is None:
                setattr(instance, field.name, [])
                continue

            children: Repository[Any] = Repository(self.driver, child, self.registry)
            rows = self.driver.fetch_where(child, fk_column.name, value, ctx)
            setattr(
                instance,
                field.name,
                [
                    children._materialize(r, ctx, loading)
                    for r in rows
                    if not _is_loading(child, r, loading)
                ],
            )


def _is_dataclass_type(tp: Any) -> bool:
    return isinstance(tp, type) and dataclasses.is_dataclass(tp)


def _foreign_key_column(
    child: EntityDescriptor, table_name: str, list_key: str | None
) -> ColumnDescriptor | None:
    if list_key:
        return child.get_column(list_key)
    for column in child.columns:
        fk = column.field.foreign_key
        if fk is not None and fk.table_name == table_name:
            return column
    return None


def _column_value(instance: Any, path: tuple[str, ...]) -> Any:
    value = instance
    for segment in path:
        value = getattr(value, segment, None)
        if value is None:
            return None
    return value


def _is_loading(
    child: EntityDescriptor, row: dict[str, Any], loading: frozenset[tuple[str, Any]]
) -> bool:
    if child.primary_key is None:
        return False
    return (child.table_name, row.get(child.primary_key.name)) in loading
