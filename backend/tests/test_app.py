"""Tests for App registration, route listing and configuration."""

import pytest

from blar.api.app import App
from blar.api.config import AppConfig
from blar.errors import NoStorageConfigured, ParseError
from blar.persistence.config import DatabaseConfig
from blar.persistence.repository import Repository

from entities import AuditEntry, Product, User


class TestRegister:
    def test_register_without_driver(self):
        with pytest.raises(NoStorageConfigured, match="database not configured"):
            App().register(User)

    def test_register_returns_descriptors(self, driver):
        app = App(driver=driver)
        descriptors = app.register(User, Product)
        assert [d.name for d in descriptors] == ["User", "Product"]
        assert set(app.entities) == {"User", "Product"}
        assert "users" in driver.metadata.tables
        assert "products" in driver.metadata.tables

    def test_register_instance(self, driver):
        app = App(driver=driver)
        app.register(User(name="sample"))
        assert "User" in app.entities

    def test_register_non_dataclass(self, driver):
        class Plain:
            pass

        with pytest.raises(ParseError):
            App(driver=driver).register(Plain)

    def test_register_twice_is_harmless(self, driver):
        app = App(driver=driver)
        app.register(User)
        app.register(User)
        assert len(app.registry) == 1

    def test_register_logs(self, driver, caplog):
        caplog.set_level("INFO", logger="blar.api.app")
        App(driver=driver).register(User)
        assert "Registered entity User (table users)" in caplog.text

    def test_repository_shares_driver(self, driver):
        app = App(driver=driver)
        app.register(User)
        repo = app.repository(User)
        assert isinstance(repo, Repository)
        repo.create(User(name="a"))
        assert app.repository(User).count() == 1


class TestRoutes:
    def test_routes(self, driver):
        app = App(driver=driver)
        app.register(User, AuditEntry)
        assert app.routes() == [
            ("POST", "/auditentry"),
            ("GET", "/auditentry"),
            ("POST", "/user"),
            ("GET", "/user"),
            ("GET", "/user/{id}"),
            ("PUT", "/user/{id}"),
            ("DELETE", "/user/{id}"),
        ]

    def test_build_includes_routes(self, app):
        api = app.build()
        paths = set(api.openapi()["paths"])
        assert "/product" in paths
        assert "/product/{id}" in paths
        assert "/_meta" in paths
        assert "/auditentry/{id}" not in paths

    def test_build_uses_title(self, driver):
        app = App(driver=driver, config=AppConfig(title="Shop"))
        assert app.build().title == "Shop"


class TestAppConfig:
    def test_defaults(self):
        config = AppConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 8080
        assert config.database.url == "sqlite:///blar.db"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("BLAR_HOST", "0.0.0.0")
        monkeypatch.setenv("BLAR_PORT", "9000")
        monkeypatch.setenv("BLAR_LOG_LEVEL", "debug")
        monkeypatch.setenv("DATABASE_URL", "sqlite://")
        config = AppConfig.from_env()
        assert config.host == "0.0.0.0"
        assert config.port == 9000
        assert config.log_level == "debug"
        assert config.database.url == "sqlite://"

    def test_from_config_connects(self):
        app = App.from_config(AppConfig(database=DatabaseConfig(url="sqlite://")))
        try:
            app.register(User)
            assert app.repository(User).count() == 0
        finally:
            app.driver.close()
