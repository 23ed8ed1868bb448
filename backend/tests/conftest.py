"""Shared fixtures."""

import pytest
from fastapi.testclient import TestClient

from blar.api.app import App
from blar.metadata.registry import EntityRegistry
from blar.persistence.sqlalchemy_driver import SQLAlchemyDriver

from entities import AuditEntry, Customer, Gadget, Order, OrderLine, Product, User, Widget


@pytest.fixture
def registry():
    return EntityRegistry()


@pytest.fixture
def driver():
    """Connected in-memory SQLite driver."""
    driver = SQLAlchemyDriver("sqlite://")
    driver.connect()
    yield driver
    driver.close()


@pytest.fixture(autouse=True)
def reset_gadget_calls():
    Gadget.calls.clear()
    yield
    Gadget.calls.clear()


@pytest.fixture
def app(driver, registry):
    app = App(driver=driver, registry=registry)
    app.register(User, Product, Customer, Order, OrderLine, AuditEntry, Widget, Gadget)
    return app


@pytest.fixture
def client(app):
    with TestClient(app.build()) as client:
        yield client
