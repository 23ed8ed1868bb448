"""SQLAlchemy Core storage driver.

Dialect-neutral: tables are built from each EntityDescriptor's columns
and created with CREATE TABLE IF NOT EXISTS semantics. Statements issued
inside `transaction()` share that transaction's connection; outside of it
each call commits on its own.
"""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    LargeBinary,
    MetaData,
    Numeric,
    String,
    Table,
    Time,
    Uuid,
    create_engine,
    func,
    select,
)
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.pool import StaticPool

from blar.core.context import RequestContext
from blar.errors import MissingPrimaryKey
from blar.metadata.types import EntityDescriptor, FieldDescriptor

# Python annotation -> SQLAlchemy column type. Anything else is stored as JSON.
COLUMN_TYPES: dict[Any, Any] = {
    int: Integer,
    float: Float,
    str: String,
    bool: Boolean,
    datetime: DateTime,
    date: Date,
    time: Time,
    Decimal: Numeric,
    bytes: LargeBinary,
    uuid.UUID: Uuid,
}


def get_column_type(tp: Any) -> Any:
    return COLUMN_TYPES.get(tp, JSON)


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///") or ":memory:" in url


class SQLAlchemyDriver:
    """StorageDriver backed by a SQLAlchemy engine."""

    def __init__(self, url: str = "sqlite://", **engine_options: Any):
        self.url = url
        self.engine_options = engine_options
        self.engine: Engine | None = None
        self.metadata = MetaData()
        self._tables: dict[str, Table] = {}
        self._current: ContextVar[Connection | None] = ContextVar(
            "blar_transaction", default=None
        )

    def connect(self) -> None:
        """Create the engine."""
        options = dict(self.engine_options)
        if self.url.startswith("sqlite"):
            options.setdefault("connect_args", {"check_same_thread": False})
            if _is_memory_sqlite(self.url):
                # One shared connection, otherwise each checkout sees an empty database
                options.setdefault("poolclass", StaticPool)
        self.engine = create_engine(self.url, **options)

    def close(self) -> None:
        """Dispose of the engine and its connections."""
        if self.engine:
            self.engine.dispose()
            self.engine = None

    def _require_engine(self) -> Engine:
        if self.engine is None:
            raise RuntimeError("Database not connected")
        return self.engine

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def initialize_entity(self, entity: EntityDescriptor) -> None:
        """Create the entity's table if it doesn't exist."""
        engine = self._require_engine()
        if entity.table_name in self._tables:
            return

        columns = []
        for col in entity.columns:
            column_type = get_column_type(col.field.type)
            if col.field is entity.primary_key:
                columns.append(
                    Column(
                        col.name,
                        column_type,
                        primary_key=True,
                        autoincrement=column_type is Integer,
                    )
                )
            else:
                columns.append(Column(col.name, column_type, nullable=True))

        table = Table(entity.table_name, self.metadata, *columns)
        self.metadata.create_all(engine, tables=[table])
        self._tables[entity.table_name] = table

    def _table(self, entity: EntityDescriptor) -> Table:
        if entity.table_name not in self._tables:
            self.initialize_entity(entity)
        return self._tables[entity.table_name]

    def _pk(self, entity: EntityDescriptor) -> FieldDescriptor:
        if entity.primary_key is None:
            raise MissingPrimaryKey(entity.name)
        return entity.primary_key

    # ------------------------------------------------------------------
    # Connections
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[Connection]:
        """Open a transaction, or join the one already open in this context.

        Commits on normal exit and rolls back if the block raises.
        """
        current = self._current.get()
        if current is not None:
            yield current
            return

        with self._require_engine().begin() as conn:
            token = self._current.set(conn)
            try:
                yield conn
            finally:
                self._current.reset(token)

    @contextmanager
    def _connection(self, ctx: RequestContext | None) -> Iterator[Connection]:
        if ctx is not None:
            ctx.raise_if_done()
        with self.transaction() as conn:
            yield conn

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def insert(
        self,
        entity: EntityDescriptor,
        values: dict[str, Any],
        ctx: RequestContext | None = None,
    ) -> Any:
        """Insert a row and return its primary key value.

        Integer keys left at 0/None are generated by the database; empty
        string keys get a random hex id.
        """
        table = self._table(entity)
        values = dict(values)
        pk = entity.primary_key
        if pk is not None and not values.get(pk.name):
            if pk.type is str:
                values[pk.name] = uuid.uuid4().hex
            else:
                values.pop(pk.name, None)

        with self._connection(ctx) as conn:
            result = conn.execute(table.insert().values(**values))

        if pk is None:
            return None
        if pk.name in values:
            return values[pk.name]
        return result.inserted_primary_key[0]

    def fetch(
        self, entity: EntityDescriptor, id: Any, ctx: RequestContext | None = None
    ) -> dict[str, Any] | None:
        """Fetch a single row by primary key, None if missing."""
        table = self._table(entity)
        pk = self._pk(entity)
        with self._connection(ctx) as conn:
            row = conn.execute(
                select(table).where(table.c[pk.name] == id)
            ).mappings().first()
        return dict(row) if row else None

    def fetch_all(
        self, entity: EntityDescriptor, ctx: RequestContext | None = None
    ) -> list[dict[str, Any]]:
        table = self._table(entity)
        with self._connection(ctx) as conn:
            rows = conn.execute(select(table)).mappings().all()
        return [dict(row) for row in rows]

    def fetch_where(
        self,
        entity: EntityDescriptor,
        column: str,
        value: Any,
        ctx: RequestContext | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch rows whose column equals value."""
        table = self._table(entity)
        with self._connection(ctx) as conn:
            rows = conn.execute(
                select(table).where(table.c[column] == value)
            ).mappings().all()
        return [dict(row) for row in rows]

    def save(
        self,
        entity: EntityDescriptor,
        id: Any,
        values: dict[str, Any],
        ctx: RequestContext | None = None,
    ) -> int:
        """Overwrite the row with the given key. Returns rows matched."""
        table = self._table(entity)
        pk = self._pk(entity)
        values = {k: v for k, v in values.items() if k != pk.name}
        if not values:
            return 1 if self.fetch(entity, id, ctx) is not None else 0

        with self._connection(ctx) as conn:
            result = conn.execute(
                table.update().where(table.c[pk.name] == id).values(**values)
            )
        return result.rowcount

    def remove(
        self, entity: EntityDescriptor, id: Any, ctx: RequestContext | None = None
    ) -> int:
        """Delete the row with the given key. Returns rows removed."""
        table = self._table(entity)
        pk = self._pk(entity)
        with self._connection(ctx) as conn:
            result = conn.execute(table.delete().where(table.c[pk.name] == id))
        return result.rowcount

    def count(
        self, entity: EntityDescriptor, ctx: RequestContext | None = None
    ) -> int:
        table = self._table(entity)
        with self._connection(ctx) as conn:
            return conn.execute(select(func.count()).select_from(table)).scalar_one()
