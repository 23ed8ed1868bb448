"""HTTP layer: generated entity routes and application wiring."""

from blar.api.app import App, run
from blar.api.config import AppConfig
from blar.api.routes import EntityCodec, create_entity_router, entity_routes, parse_id

__all__ = [
    "App",
    "AppConfig",
    "EntityCodec",
    "create_entity_router",
    "entity_routes",
    "parse_id",
    "run",
]
