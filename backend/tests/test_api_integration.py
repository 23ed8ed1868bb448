"""Integration tests for the generated REST routes."""

import pytest

from entities import Gadget, Product


def create(client, resource, **data):
    """Helper to create an entity and return the response body."""
    response = client.post(f"/{resource}", json=data)
    assert response.status_code == 201, response.text
    return response.json()


# =============================================================================
# Create
# =============================================================================


class TestCreate:
    def test_create_returns_201_with_key(self, client):
        body = create(client, "user", name="Ann", email="ann@example.com")
        assert body == {"id": 1, "name": "Ann", "email": "ann@example.com"}

    def test_read_only_fields_ignored(self, client):
        body = create(client, "product", name="Pen", price=1.5, quantity=99)
        assert body["quantity"] == 0

    def test_hidden_fields_not_returned(self, client):
        body = create(client, "product", name="Pen", secret="s3cret")
        assert "secret" not in body
        fetched = client.get(f"/product/{body['id']}").json()
        assert "secret" not in fetched

    def test_string_key_generated(self, client):
        body = create(client, "widget", label="w")
        assert len(body["id"]) == 32
        assert client.get(f"/widget/{body['id']}").json()["label"] == "w"

    def test_invalid_json(self, client):
        response = client.post(
            "/user", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json()["detail"].startswith("Invalid request body")

    def test_non_object_body(self, client):
        response = client.post("/user", json=[1, 2, 3])
        assert response.status_code == 400

    def test_wrong_field_type(self, client):
        response = client.post("/user", json={"name": {"first": "Ann"}})
        assert response.status_code == 400
        assert client.get("/user").json() == []


# =============================================================================
# Read
# =============================================================================


class TestRead:
    def test_list_empty(self, client):
        response = client.get("/user")
        assert response.status_code == 200
        assert response.json() == []

    def test_list_all(self, client):
        create(client, "user", name="a")
        create(client, "user", name="b")
        names = [u["name"] for u in client.get("/user").json()]
        assert sorted(names) == ["a", "b"]

    def test_get_by_id(self, client):
        body = create(client, "user", name="Ann")
        response = client.get(f"/user/{body['id']}")
        assert response.status_code == 200
        assert response.json() == body

    def test_get_missing_returns_404(self, client):
        response = client.get("/user/999")
        assert response.status_code == 404
        assert response.json()["detail"] == "Not found"

    def test_get_invalid_id_returns_400(self, client):
        response = client.get("/user/abc")
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid ID"

    def test_related_list_and_aggregates(self, client):
        order = create(client, "order", customer_id=1)
        create(client, "orderline", order_id=order["id"], label="a", price=2.5, note="internal")
        create(client, "orderline", order_id=order["id"], label="b", price=4.0, note="internal")

        body = client.get(f"/order/{order['id']}").json()
        assert body["line_count"] == 2
        assert body["total"] == 6.5
        assert [line["label"] for line in body["lines"]] == ["a", "b"]
        assert all("note" not in line for line in body["lines"])


# =============================================================================
# Update
# =============================================================================


class TestUpdate:
    def test_update(self, client):
        body = create(client, "user", name="Ann", email="old@example.com")
        response = client.put(f"/user/{body['id']}", json={"email": "new@example.com"})
        assert response.status_code == 200
        assert response.json() == {"id": body["id"], "name": "Ann", "email": "new@example.com"}
        assert client.get(f"/user/{body['id']}").json()["email"] == "new@example.com"

    def test_update_cannot_change_key(self, client):
        body = create(client, "user", name="Ann")
        response = client.put(f"/user/{body['id']}", json={"id": 500, "name": "Bo"})
        assert response.json()["id"] == body["id"]
        assert client.get("/user/500").status_code == 404

    def test_update_preserves_read_only(self, client, app):
        body = create(client, "product", name="Pen")
        repo = app.repository(Product)
        stored = repo.get_by_id(body["id"])
        stored.quantity = 7
        repo.update(stored)

        response = client.put(f"/product/{body['id']}", json={"quantity": 1, "price": 3.0})
        assert response.json()["quantity"] == 7
        assert response.json()["price"] == 3.0

    def test_update_missing_returns_404(self, client):
        assert client.put("/user/999", json={"name": "x"}).status_code == 404

    def test_update_invalid_id_returns_400(self, client):
        assert client.put("/user/abc", json={"name": "x"}).status_code == 400

    def test_update_invalid_body_returns_400(self, client):
        body = create(client, "user", name="Ann")
        assert client.put(f"/user/{body['id']}", json="nope").status_code == 400


# =============================================================================
# Delete
# =============================================================================


class TestDelete:
    def test_delete_returns_204(self, client):
        body = create(client, "user", name="Ann")
        response = client.delete(f"/user/{body['id']}")
        assert response.status_code == 204
        assert response.content == b""
        assert client.get(f"/user/{body['id']}").status_code == 404

    def test_delete_missing_returns_404(self, client):
        assert client.delete("/user/999").status_code == 404

    def test_delete_invalid_id_returns_400(self, client):
        assert client.delete("/user/abc").status_code == 400


# =============================================================================
# Hooks
# =============================================================================


class TestHooks:
    def test_create_runs_before_and_after(self, client):
        create(client, "gadget", name="g", price=1.0)
        assert Gadget.calls == ["before_create", "after_create"]

    def test_before_create_failure_skips_storage(self, client):
        response = client.post("/gadget", json={"name": "g", "price": -1.0})
        assert response.status_code == 500
        assert response.json()["detail"] == "price must not be negative"
        assert Gadget.calls == ["before_create"]
        assert client.get("/gadget").json() == []

    def test_after_create_failure_rolls_back(self, client):
        response = client.post("/gadget", json={"name": "explode"})
        assert response.status_code == 500
        assert Gadget.calls == ["before_create", "after_create"]
        assert client.get("/gadget").json() == []

    def test_update_runs_before_and_after(self, client):
        body = create(client, "gadget", name="g")
        Gadget.calls.clear()
        client.put(f"/gadget/{body['id']}", json={"price": 2.0})
        assert Gadget.calls == ["before_update", "after_update"]

    def test_before_update_failure_keeps_stored_row(self, client):
        body = create(client, "gadget", name="g")
        Gadget.calls.clear()
        response = client.put(f"/gadget/{body['id']}", json={"name": "locked"})
        assert response.status_code == 500
        assert Gadget.calls == ["before_update"]
        assert client.get(f"/gadget/{body['id']}").json()["name"] == "g"

    def test_delete_runs_sync_hooks(self, client):
        body = create(client, "gadget", name="g")
        Gadget.calls.clear()
        assert client.delete(f"/gadget/{body['id']}").status_code == 204
        assert Gadget.calls == ["before_delete", "after_delete"]

    def test_before_delete_failure_keeps_row(self, client):
        body = create(client, "gadget", name="keep")
        response = client.delete(f"/gadget/{body['id']}")
        assert response.status_code == 500
        assert client.get(f"/gadget/{body['id']}").status_code == 200

    def test_entities_without_hooks_unaffected(self, client):
        create(client, "user", name="Ann")
        assert Gadget.calls == []


# =============================================================================
# Entities without a primary key
# =============================================================================


class TestNoPrimaryKey:
    def test_create_and_list(self, client):
        create(client, "auditentry", message="hello")
        assert client.get("/auditentry").json() == [{"message": "hello"}]

    @pytest.mark.parametrize("method", ["get", "put", "delete"])
    def test_no_id_routes(self, client, method):
        kwargs = {"json": {}} if method == "put" else {}
        response = getattr(client, method)("/auditentry/1", **kwargs)
        assert response.status_code in (404, 405)


# =============================================================================
# Metadata endpoints
# =============================================================================


class TestMetadataEndpoints:
    def test_list_entities(self, client):
        response = client.get("/_meta")
        assert response.status_code == 200
        entities = response.json()["entities"]
        assert [e["name"] for e in entities] == [
            "AuditEntry",
            "Customer",
            "Gadget",
            "Order",
            "OrderLine",
            "Product",
            "User",
            "Widget",
        ]
        line = next(e for e in entities if e["name"] == "OrderLine")
        assert line == {"name": "OrderLine", "table": "order_items", "resource": "/orderline"}

    def test_describe_entity(self, client):
        body = client.get("/_meta/Order").json()
        assert body["entity"] == "Order"
        assert body["table"] == "orders"
        assert body["primaryKey"] == "id"
        assert body["columns"] == ["id", "customer_id"]
        assert {a["kind"] for a in body["aggregates"]} == {"count", "sum"}

    def test_describe_unknown_entity(self, client):
        assert client.get("/_meta/Nope").status_code == 404
