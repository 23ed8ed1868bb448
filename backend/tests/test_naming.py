"""Tests for identifier case conversion."""

import pytest

from blar.core.naming import default_table_name, pluralize, resource_name, to_snake_case


class TestToSnakeCase:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("UserName", "user_name"),
            ("ID", "id"),
            ("Product", "product"),
            ("HTTPServer", "http_server"),
            ("userID", "user_id"),
            ("OrderLine", "order_line"),
            ("JSONAPIResponse", "jsonapi_response"),
        ],
    )
    def test_conversion_table(self, name, expected):
        assert to_snake_case(name) == expected

    def test_existing_underscores_not_doubled(self):
        assert to_snake_case("User_Name") == "user_name"
        assert to_snake_case("already_snake") == "already_snake"

    def test_no_leading_underscore(self):
        assert not to_snake_case("Product").startswith("_")

    def test_empty(self):
        assert to_snake_case("") == ""

    def test_deterministic(self):
        assert to_snake_case("HTTPServer") == to_snake_case("HTTPServer")


class TestTableAndResourceNames:
    def test_pluralize(self):
        assert pluralize("user") == "users"

    def test_default_table_name(self):
        assert default_table_name("User") == "users"
        assert default_table_name("OrderLine") == "order_lines"

    def test_resource_name_is_lowercased_name(self):
        assert resource_name("Product") == "product"
        assert resource_name("OrderLine") == "orderline"
