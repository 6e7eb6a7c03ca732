"""
JSON API smoke tests over the Flask test client.
"""

from offline_stock.migrations import LATEST_VERSION
from offline_stock.services.seed_service import SEED_VERSION


def test_health_and_store_status(client):
    response = client.get("/api/system/health")
    assert response.status_code == 200
    assert response.get_json()["status"] == "healthy"

    status = client.get("/api/system/store").get_json()
    assert status["schema_version"] == LATEST_VERSION
    assert status["seed_version"] == SEED_VERSION
    assert status["in_memory"] is True


def test_product_endpoints(client):
    response = client.post("/api/products/", json={"name": "Soap", "sell_price": 3, "quantity": 8})
    assert response.status_code == 201
    product_id = response.get_json()["product"]["id"]

    assert client.get(f"/api/products/{product_id}").get_json()["product"]["name"] == "Soap"
    assert client.post(f"/api/products/{product_id}/adjust", json={"delta": -3}).get_json()["product"]["quantity"] == 5
    assert client.get("/api/products/999").status_code == 404

    response = client.post("/api/products/", json={"sell_price": 3})
    assert response.status_code == 400
    assert response.get_json()["details"] == {"field": "name"}


def test_sale_payment_and_monthly_restock_flow(client):
    product_id = client.post("/api/products/", json={"name": "Widget", "sell_price": 25, "quantity": 10}).get_json()["product"]["id"]
    customer_id = client.post("/api/customers/", json={"name": "Maria"}).get_json()["customer"]["id"]

    response = client.post("/api/sales/", json={
        "customer_id": customer_id,
        "payment_status": "debt",
        "items": [{"product_id": product_id, "quantity": 4}],
    })
    assert response.status_code == 201
    transaction = response.get_json()["transaction"]
    assert transaction["total_amount"] == 100
    assert transaction["payment_status"] == "debt"

    response = client.post(f"/api/sales/{transaction['id']}/payments", json={"amount": 40})
    assert response.status_code == 201
    assert response.get_json()["transaction"]["outstanding"] == 60

    assert client.post(f"/api/sales/{transaction['id']}/payments", json={"amount": 70}).status_code == 400
    assert client.get(f"/api/customers/{customer_id}/summary").get_json()["debt"] == 60

    monthly = client.get("/api/shopping-lists/monthly-restock").get_json()["list"]
    assert [(i["product_id"], i["quantity_value"]) for i in monthly["items"]] == [(product_id, 4)]

    transfer = client.post("/api/shopping-lists/monthly-restock/transfer").get_json()["transfer"]
    assert transfer["total_quantity"] == 4
    assert client.get(f"/api/products/{product_id}").get_json()["product"]["quantity"] == 10


def test_empty_cart_is_a_400(client):
    response = client.post("/api/sales/", json={"payment_status": "fully_paid", "items": []})
    assert response.status_code == 400
    assert response.get_json()["error"] == "Cart is empty"


def test_shopping_list_flow(client):
    response = client.post("/api/shopping-lists/", json={"title": "Weekend"})
    assert response.status_code == 201
    list_id = response.get_json()["list"]["id"]

    response = client.post(f"/api/shopping-lists/{list_id}/items", json={"name": "Charcoal", "quantity_label": "2 bags", "estimated_unit_cost": 7})
    assert response.status_code == 201

    result = client.post(f"/api/shopping-lists/{list_id}/status", json={"status": "completed"}).get_json()
    assert result["transfer"]["updated_products"] == 1
    assert result["list"]["status"] == "completed"

    detail = client.get(f"/api/shopping-lists/{list_id}").get_json()["list"]
    assert detail["can_rollback"] is True
    assert detail["items"][0]["product_name"] == "Charcoal"

    rollback = client.post(f"/api/shopping-lists/{list_id}/rollback").get_json()["rollback"]
    assert rollback["removed_products"] == 1
    assert client.get(f"/api/shopping-lists/{list_id}/rollback").get_json() == {"available": False}
    assert client.post(f"/api/shopping-lists/{list_id}/rollback").status_code == 400

    lists = client.get("/api/shopping-lists/").get_json()["lists"]
    assert {row["type"] for row in lists} >= {"restock", "monthly_restock"}

    monthly_id = next(row["id"] for row in lists if row["type"] == "monthly_restock")
    assert client.delete(f"/api/shopping-lists/{monthly_id}").status_code == 400
    assert client.get("/api/shopping-lists/4040").status_code == 404
