"""Application wiring: register entities and serve their generated routes."""

import logging
from collections.abc import Sequence
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from starlette.middleware import Middleware

from blar.api.config import AppConfig
from blar.api.metadata import create_metadata_router
from blar.api.routes import create_entity_router, entity_routes
from blar.errors import NoStorageConfigured
from blar.hooks.dispatcher import HookDispatcher
from blar.metadata.registry import EntityRegistry
from blar.metadata.types import EntityDescriptor
from blar.persistence.config import create_driver
from blar.persistence.driver import StorageDriver
from blar.persistence.repository import Repository

logger = logging.getLogger(__name__)


class App:
    """Holds the registry, storage driver and registered entities.

    The driver must already be connected when entities are registered.

    Example:
        driver = SQLAlchemyDriver("sqlite:///app.db")
        driver.connect()
        app = App(driver=driver)
        app.register(Product, User)
        app.start()
    """

    def __init__(
        self,
        driver: StorageDriver | None = None,
        config: AppConfig | None = None,
        registry: EntityRegistry | None = None,
        middleware: Sequence[Middleware] = (),
        dispatcher: HookDispatcher | None = None,
    ):
        self.driver = driver
        self.config = config or AppConfig()
        self.registry = registry or EntityRegistry()
        self.middleware = list(middleware)
        self.dispatcher = dispatcher or HookDispatcher()
        self.entities: dict[str, EntityDescriptor] = {}

    @classmethod
    def from_config(cls, config: AppConfig, **kwargs: Any) -> "App":
        """Create an app with a connected driver built from config.database."""
        driver = create_driver(config.database)
        driver.connect()
        return cls(driver=driver, config=config, **kwargs)

    def register(self, *models: Any) -> list[EntityDescriptor]:
        """Parse entity dataclasses and create their tables.

        Raises:
            NoStorageConfigured: If the app has no driver
            ParseError: If a model is not a dataclass or instance of one
        """
        if self.driver is None:
            raise NoStorageConfigured("database not configured: pass a driver to App")

        registered = []
        for model in models:
            descriptor = self.registry.parse(model)
            self.driver.initialize_entity(descriptor)
            self.entities[descriptor.name] = descriptor
            registered.append(descriptor)
            logger.info(
                "Registered entity %s (table %s)", descriptor.name, descriptor.table_name
            )
        return registered

    def repository(self, model: Any) -> Repository[Any]:
        """Repository for a model, sharing this app's driver and registry."""
        return Repository(self.driver, self.registry.parse(model), self.registry)

    def routes(self) -> list[tuple[str, str]]:
        """(method, path) of every generated entity route."""
        routes: list[tuple[str, str]] = []
        for name in sorted(self.entities):
            routes.extend(entity_routes(self.entities[name]))
        return routes

    def build(self) -> FastAPI:
        """Build the FastAPI application for the registered entities."""

        @asynccontextmanager
        async def lifespan(api: FastAPI):
            yield
            if self.driver:
                self.driver.close()

        api = FastAPI(
            title=self.config.title,
            lifespan=lifespan,
            middleware=self.middleware,
        )
        api.include_router(create_metadata_router(lambda: self.entities))
        for name in sorted(self.entities):
            descriptor = self.entities[name]
            api.include_router(
                create_entity_router(
                    descriptor,
                    Repository(self.driver, descriptor, self.registry),
                    self.dispatcher,
                    self.registry,
                )
            )
        return api

    def start(self) -> None:
        """Serve the application with uvicorn (blocks)."""
        import uvicorn

        logger.info("Starting server on %s:%d", self.config.host, self.config.port)
        uvicorn.run(
            self.build(),
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level,
        )


def run(*models: Any, config: AppConfig | None = None) -> None:
    """Register models and serve them, configured from the environment."""
    app = App.from_config(config or AppConfig.from_env())
    app.register(*models)
    app.start()
