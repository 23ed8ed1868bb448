"""Read-only endpoints exposing registered entity metadata."""

from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, HTTPException

from blar.core.naming import resource_name
from blar.metadata.export import describe_entity
from blar.metadata.types import EntityDescriptor


def create_metadata_router(
    get_entities: Callable[[], dict[str, EntityDescriptor]],
) -> APIRouter:
    """Create the /_meta router.

    Args:
        get_entities: Returns the registered entities keyed by name
    """
    router = APIRouter(prefix="/_meta", tags=["metadata"])

    @router.get("")
    async def list_entities() -> dict[str, Any]:
        """List all registered entities."""
        entities = get_entities()
        return {
            "entities": [
                {
                    "name": e.name,
                    "table": e.table_name,
                    "resource": "/" + resource_name(e.name),
                }
                for e in sorted(entities.values(), key=lambda e: e.name)
            ]
        }

    @router.get("/{name}")
    async def get_entity_metadata(name: str) -> dict[str, Any]:
        """Get the full descriptor of one entity."""
        entity = get_entities().get(name)
        if entity is None:
            raise HTTPException(404, f"Entity '{name}' not found")
        return describe_entity(entity)

    return router
