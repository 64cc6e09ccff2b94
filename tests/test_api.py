"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from linen_tool.config import LinenConfig


@pytest.fixture
def client(store):
    """Return a test client bound to the sample store."""
    return TestClient(create_app(store=store, config=LinenConfig()))


class TestHealth:
    def test_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_root(self, client):
        assert client.get("/").json()["health"] == "/api/v1/health"


class TestBatches:
    def test_get_batch(self, client):
        body = client.get("/api/v1/batches/b-1002").json()
        assert body["success"] is True
        assert body["batch"]["status"] == "washing"
        assert body["batch"]["next_status"] == "completed"
        assert body["batch"]["total_amount"] == 200.0
        assert body["batch"]["client_name"] == "Blue Spa"

    def test_delivered_has_no_next_status(self, client):
        body = client.get("/api/v1/batches/b-1001").json()
        assert body["batch"]["next_status"] is None
        assert body["batch"]["is_terminal"] is True

    def test_unknown_batch(self, client):
        response = client.get("/api/v1/batches/missing")
        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error_type": "not_found",
            "errors": ["Batch missing not found"],
        }

    def test_create_batch(self, client):
        response = client.post("/api/v1/batches", json={
            "client_id": "clinic",
            "pickup_date": "2025-02-03",
            "items": [
                {"linen_category_id": "sheet", "quantity_sent": 6},
                {"linen_category_id": "pillow", "quantity_sent": 2, "price_per_item": "3.10",
                 "express_delivery": True},
            ],
        })
        assert response.status_code == 201
        batch = response.json()["batch"]
        assert batch["paper_batch_id"] == "RSL0004"
        assert batch["status"] == "pickup"
        # 15.00 + (6.20 + 3.10)
        assert batch["total_amount"] == 24.3

    def test_create_duplicate_paper_id(self, client):
        response = client.post("/api/v1/batches", json={
            "client_id": "clinic",
            "pickup_date": "2025-02-03",
            "paper_batch_id": "RSL0001",
        })
        assert response.status_code == 409
        assert response.json()["error_type"] == "duplicate_batch_id"

    def test_create_negative_quantity(self, client):
        response = client.post("/api/v1/batches", json={
            "client_id": "clinic",
            "pickup_date": "2025-02-03",
            "items": [{"linen_category_id": "sheet", "quantity_sent": -3}],
        })
        assert response.status_code == 400
        assert response.json()["error_type"] == "invalid_quantity"

    def test_create_fractional_quantity(self, client):
        response = client.post("/api/v1/batches", json={
            "client_id": "clinic",
            "pickup_date": "2025-02-03",
            "items": [{"linen_category_id": "sheet", "quantity_sent": 2.5}],
        })
        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error_type"] == "invalid_quantity"
        assert body["errors"][0].startswith("items.0.quantity_sent:")

    def test_create_malformed_date(self, client):
        response = client.post("/api/v1/batches", json={"client_id": "clinic", "pickup_date": "soon"})
        assert response.status_code == 400
        assert response.json()["error_type"] == "invalid_request"

    def test_create_unknown_category(self, client):
        response = client.post("/api/v1/batches", json={
            "client_id": "clinic",
            "pickup_date": "2025-02-03",
            "items": [{"linen_category_id": "apron", "quantity_sent": 1}],
        })
        assert response.status_code == 400
        assert response.json()["error_type"] == "category_not_found"

    def test_replace_items(self, client):
        response = client.put("/api/v1/batches/b-1001/items", json={
            "items": [
                {"linen_category_id": "sheet", "quantity_sent": 10, "quantity_received": 10},
                {"linen_category_id": "pillow", "quantity_sent": 5},
            ],
        })
        assert response.status_code == 200
        body = response.json()
        assert body["changes"] == {"updated": 1, "inserted": 1, "removed": 1}
        # sheet keeps its frozen 2.50; pillow 5 x 1.20
        assert body["batch"]["total_amount"] == 31.0
        assert body["batch"]["has_discrepancy"] is False

    def test_update_status(self, client):
        response = client.patch("/api/v1/batches/b-1002/status", json={"status": "completed"})
        assert response.status_code == 200
        assert response.json()["batch"]["status"] == "completed"

    def test_update_status_invalid(self, client):
        response = client.patch("/api/v1/batches/b-1002/status", json={"status": "lost"})
        assert response.status_code == 400
        assert response.json()["error_type"] == "service_error"


class TestInvoice:
    def test_invoice(self, client):
        body = client.get("/api/v1/batches/b-1001/invoice").json()
        assert body["subtotal_received"] == 70.0
        assert body["total_discrepancy_value"] == -5.0
        assert body["total_surcharge"] == 25.0
        assert body["adjusted_subtotal"] == 90.0
        assert body["vat"] == 13.5
        assert body["total"] == 103.5
        assert body["has_discrepancy"] is True

        sheet = body["lines"][0]
        assert sheet["category_name"] == "Bed Sheet"
        assert sheet["discrepancy"] == -2
        assert sheet["line_adjusted_total"] == 15.0

        assert body["summary"]["discrepancy_percentage"] == 13.33
        assert body["summary"]["average_item_price"] == 6.0


class TestReports:
    def test_month_summary(self, client):
        body = client.get("/api/v1/reports", params={"month": "2025-01"}).json()
        assert body["period"] == "2025-01"
        assert body["start_date"] == "2025-01-01"
        assert body["end_date"] == "2025-01-31"
        assert [c["client_id"] for c in body["clients"]] == ["spa", "hotel"]

        hotel = body["clients"][1]
        assert hotel["batch_count"] == 2
        assert hotel["total_items_washed"] == 41
        assert hotel["total_amount"] == 121.2
        assert hotel["discrepancy_batches"] == 2

    def test_year_summary(self, client):
        body = client.get("/api/v1/reports", params={"year": 2024}).json()
        assert body["period"] == "2024"
        assert [c["client_id"] for c in body["clients"]] == ["clinic"]

    def test_bad_month(self, client):
        response = client.get("/api/v1/reports", params={"month": "2025-13"})
        assert response.status_code == 400
        assert response.json()["error_type"] == "invalid_period"

    def test_year_out_of_range(self, client):
        response = client.get("/api/v1/reports", params={"year": 2035})
        assert response.status_code == 400

    def test_client_batches(self, client):
        body = client.get("/api/v1/reports/client-batches",
                          params={"client_id": "hotel", "month": "2025-01"}).json()
        assert [b["id"] for b in body["batches"]] == ["b-1001", "b-1003"]

    def test_client_batches_unknown_client(self, client):
        response = client.get("/api/v1/reports/client-batches",
                              params={"client_id": "ghost", "month": "2025-01"})
        assert response.status_code == 404

    def test_stats(self, client):
        body = client.get("/api/v1/reports/stats", params={"month": "2025-01"}).json()
        assert body["total_batches"] == 3
        assert body["total_revenue"] == 321.2
        assert body["total_items_processed"] == 61
        assert body["average_batch_value"] == 107.07
        assert body["completed_batches"] == 1
        assert body["pending_batches"] == 2
        assert body["discrepancy_percentage"] == 66.67
        assert [c["client_id"] for c in body["top_clients"]] == ["spa", "hotel"]
        assert [c["category_id"] for c in body["top_categories"]] == ["pillow", "towel", "sheet"]
        # previous month: one batch, 30.00, 12 items
        assert body["batch_growth"] == 200.0
        assert body["revenue_growth"] == 970.67
        assert body["items_growth"] == 408.33


class TestCategories:
    def test_list(self, client):
        body = client.get("/api/v1/categories", params={"active_only": True}).json()
        assert [c["id"] for c in body["categories"]] == ["towel", "sheet", "pillow"]

    def test_update_price(self, client):
        response = client.patch("/api/v1/categories/sheet", json={"price": "3.00"})
        assert response.status_code == 200
        assert response.json()["category"]["price_per_item"] == 3.0
        # written lines keep their price
        assert client.get("/api/v1/batches/b-1001").json()["batch"]["total_amount"] == 90.0

    def test_negative_price(self, client):
        response = client.patch("/api/v1/categories/sheet", json={"price": -1})
        assert response.status_code == 400
        assert response.json()["error_type"] == "invalid_category"

    def test_deactivate_blocks_new_batches(self, client):
        client.patch("/api/v1/categories/towel", json={"is_active": False})
        response = client.post("/api/v1/batches", json={
            "client_id": "spa",
            "pickup_date": "2025-02-03",
            "items": [{"linen_category_id": "towel", "quantity_sent": 1}],
        })
        assert response.status_code == 400
        assert response.json()["error_type"] == "category_inactive"

    def test_bulk_prices(self, client):
        response = client.patch("/api/v1/categories", json={
            "updates": [{"id": "sheet", "price": "2.75"}, {"id": "pillow", "price": "1.50"}],
        })
        assert response.status_code == 200
        assert [c["price_per_item"] for c in response.json()["categories"]] == [2.75, 1.5]

    def test_bulk_prices_empty(self, client):
        response = client.patch("/api/v1/categories", json={"updates": []})
        assert response.status_code == 400


class TestClients:
    def test_list(self, client):
        body = client.get("/api/v1/clients").json()
        assert [c["name"] for c in body["clients"]] == ["Blue Spa", "Harbour Hotel", "Northside Clinic"]

    def test_create(self, client):
        response = client.post("/api/v1/clients", json={"name": "Lakeside Lodge", "email": "desk@lakeside.example"})
        assert response.status_code == 201
        created = response.json()["client"]
        assert created["is_active"] is True

        batch = client.post("/api/v1/batches", json={"client_id": created["id"], "pickup_date": "2025-02-03"})
        assert batch.status_code == 201

    def test_create_blank_name(self, client):
        response = client.post("/api/v1/clients", json={"name": "  "})
        assert response.status_code == 400
        assert response.json()["error_type"] == "invalid_client"

    def test_update(self, client):
        response = client.patch("/api/v1/clients/spa", json={"contact_number": "021 555 0199"})
        assert response.status_code == 200
        body = response.json()["client"]
        assert body["contact_number"] == "021 555 0199"
        assert body["email"] == "ops@bluespa.example"

    def test_update_unknown(self, client):
        response = client.patch("/api/v1/clients/ghost", json={"name": "Ghost"})
        assert response.status_code == 404
