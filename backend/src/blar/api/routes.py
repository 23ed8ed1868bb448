"""Generated REST routes for registered entities.

For an entity named Product the router exposes:

    POST   /product        create
    GET    /product        list
    GET    /product/{id}   get by id
    PUT    /product/{id}   update
    DELETE /product/{id}   delete

Writes run inside a repository transaction whose handle is passed to the
entity's hooks: a failing before hook prevents the storage call, and a
failing after hook rolls the transaction back.
"""

import logging
import uuid
from typing import Any

from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import TypeAdapter

from blar.core.context import Operation, RequestContext
from blar.core.naming import resource_name
from blar.errors import NotFound
from blar.hooks.dispatcher import HookDispatcher
from blar.metadata.registry import EntityRegistry
from blar.metadata.types import EntityDescriptor
from blar.persistence.repository import Repository

logger = logging.getLogger(__name__)


def entity_routes(entity: EntityDescriptor) -> list[tuple[str, str]]:
    """(method, path) pairs generated for an entity."""
    base = "/" + resource_name(entity.name)
    routes = [("POST", base), ("GET", base)]
    if entity.primary_key is not None:
        item = base + "/{id}"
        routes += [("GET", item), ("PUT", item), ("DELETE", item)]
    return routes


def parse_id(entity: EntityDescriptor, raw: str) -> Any:
    """Convert a path parameter to the primary key's type.

    Raises:
        ValueError: If raw is not a valid value of that type
    """
    pk_type = entity.primary_key.type if entity.primary_key else str
    if pk_type is int:
        return int(raw)
    if pk_type is uuid.UUID:
        return uuid.UUID(raw)
    return raw


class EntityCodec:
    """Converts between JSON payloads and entity instances.

    Decoding ignores read-only fields; encoding drops hidden fields,
    including those of nested and listed sub-entities.
    """

    def __init__(self, entity: EntityDescriptor, registry: EntityRegistry | None = None):
        self.entity = entity
        self.registry = registry
        self.adapter = TypeAdapter(entity.type)

    def _writable(self, payload: Any) -> dict[str, Any]:
        if not isinstance(payload, dict):
            raise ValueError("request body must be a JSON object")
        read_only = set(self.entity.read_only_fields)
        return {k: v for k, v in payload.items() if k not in read_only}

    def decode(self, payload: Any) -> Any:
        """Build a fresh instance from a create payload."""
        return self.adapter.validate_python(self._writable(payload))

    def merge(self, stored: Any, payload: Any) -> Any:
        """Apply an update payload onto a stored instance.

        The primary key always comes from the stored instance.
        """
        data = self.adapter.dump_python(stored)
        data.update(self._writable(payload))
        pk = self.entity.primary_key
        if pk is not None:
            data[pk.name] = getattr(stored, pk.name)
        return self.adapter.validate_python(data)

    def encode(self, instance: Any) -> dict[str, Any]:
        data = self.adapter.dump_python(instance, mode="json")
        self._strip_hidden(self.entity, data)
        return data

    def _strip_hidden(self, entity: EntityDescriptor, data: dict[str, Any]) -> None:
        for name in entity.hidden_fields:
            data.pop(name, None)
        for nested in entity.nested:
            value = data.get(nested.name)
            if isinstance(value, dict):
                self._strip_hidden(nested.entity, value)
        if self.registry is None:
            return
        for field in entity.fields:
            value = data.get(field.name)
            if not field.is_list or not isinstance(value, list):
                continue
            if not isinstance(field.element_type, type):
                continue
            if field.element_type not in self.registry:
                continue
            child = self.registry.parse(field.element_type)
            for item in value:
                if isinstance(item, dict):
                    self._strip_hidden(child, item)


def _http_error(entity: EntityDescriptor, exc: Exception) -> HTTPException:
    if isinstance(exc, NotFound):
        return HTTPException(404, "Not found")
    logger.exception("%s request failed: %s", entity.name, exc)
    return HTTPException(500, str(exc))


def create_entity_router(
    entity: EntityDescriptor,
    repository: Repository[Any],
    dispatcher: HookDispatcher,
    registry: EntityRegistry | None = None,
) -> APIRouter:
    """Create the five CRUD routes for one entity."""
    router = APIRouter(tags=[entity.name])
    codec = EntityCodec(entity, registry)
    base = "/" + resource_name(entity.name)

    def context(operation: Operation) -> RequestContext:
        return RequestContext(entity_name=entity.name, operation=operation)

    async def read_body(request: Request) -> Any:
        try:
            return await request.json()
        except ValueError:
            raise HTTPException(400, "Invalid request body")

    def item_id(raw: str) -> Any:
        try:
            return parse_id(entity, raw)
        except ValueError:
            raise HTTPException(400, "Invalid ID")

    @router.post(base, status_code=201)
    async def create_entity(request: Request) -> dict[str, Any]:
        payload = await read_body(request)
        try:
            instance = codec.decode(payload)
        except ValueError as e:
            raise HTTPException(400, f"Invalid request body: {e}")

        ctx = context(Operation.CREATE)
        try:
            with repository.transaction() as tx:
                await dispatcher.call_before_create(ctx, instance, tx)
                repository.create(instance, ctx)
                await dispatcher.call_after_create(ctx, instance, tx)
        except Exception as e:
            raise _http_error(entity, e) from e
        return codec.encode(instance)

    @router.get(base)
    async def list_entities() -> list[dict[str, Any]]:
        try:
            instances = repository.get_all(context(Operation.READ))
        except Exception as e:
            raise _http_error(entity, e) from e
        return [codec.encode(i) for i in instances]

    if entity.primary_key is None:
        logger.warning(
            "Entity %s has no primary key; only create and list routes registered",
            entity.name,
        )
        return router

    item = base + "/{id}"

    @router.get(item)
    async def get_entity(id: str) -> dict[str, Any]:
        key = item_id(id)
        try:
            instance = repository.get_by_id(key, context(Operation.READ))
        except Exception as e:
            raise _http_error(entity, e) from e
        return codec.encode(instance)

    @router.put(item)
    async def update_entity(id: str, request: Request) -> dict[str, Any]:
        key = item_id(id)
        payload = await read_body(request)
        ctx = context(Operation.UPDATE)
        try:
            stored = repository.get_by_id(key, ctx)
        except Exception as e:
            raise _http_error(entity, e) from e

        try:
            instance = codec.merge(stored, payload)
        except ValueError as e:
            raise HTTPException(400, f"Invalid request body: {e}")

        try:
            with repository.transaction() as tx:
                await dispatcher.call_before_update(ctx, instance, tx)
                repository.update(instance, ctx)
                await dispatcher.call_after_update(ctx, instance, tx)
        except Exception as e:
            raise _http_error(entity, e) from e
        return codec.encode(instance)

    @router.delete(item, status_code=204)
    async def delete_entity(id: str) -> Response:
        key = item_id(id)
        ctx = context(Operation.DELETE)
        try:
            stored = repository.get_by_id(key, ctx)
            with repository.transaction() as tx:
                await dispatcher.call_before_delete(ctx, stored, tx)
                repository.delete(key, ctx)
                await dispatcher.call_after_delete(ctx, stored, tx)
        except Exception as e:
            raise _http_error(entity, e) from e
        return Response(status_code=204)

    logger.info("Registered routes for %s at %s", entity.name, base)
    return router
