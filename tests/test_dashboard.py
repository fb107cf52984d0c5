from tests.fixtures_data import (
    NEW_PRODUCT_PAYLOAD,
    SEEDED_CATEGORY_STATS,
    SEEDED_PRODUCT_COUNT,
    SEEDED_TOTAL_VALUE,
)


def test_dashboard_stats_aggregate_seeded_products(client, manager_headers):
    response = client.get("/dashboard/stats", headers=manager_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["totalProducts"] == SEEDED_PRODUCT_COUNT
    assert body["totalValue"] == SEEDED_TOTAL_VALUE
    assert body["lowStockItems"] == 1
    assert body["categoryStats"] == SEEDED_CATEGORY_STATS
    assert body["recentActivities"] == []


def test_dashboard_is_manager_only(client, keeper_headers):
    response = client.get("/dashboard/stats", headers=keeper_headers)

    assert response.status_code == 403
    assert response.json() == {"error": "Insufficient permissions"}


def test_dashboard_counts_stock_equal_to_threshold_as_low(client, manager_headers):
    payload = {**NEW_PRODUCT_PAYLOAD, "stock": 15, "lowStockThreshold": 15}
    client.post("/products", json=payload, headers=manager_headers)

    body = client.get("/dashboard/stats", headers=manager_headers).json()

    assert body["lowStockItems"] == 2
    assert body["categoryStats"]["Precious Metals"] == 2


def test_recent_activities_record_product_changes(client, manager_headers):
    created = client.post("/products", json=NEW_PRODUCT_PAYLOAD, headers=manager_headers).json()
    client.put(f"/products/{created['id']}", json={"stock": 3}, headers=manager_headers)

    activities = client.get("/dashboard/stats", headers=manager_headers).json()["recentActivities"]

    assert [entry["action"] for entry in activities] == [
        "Stock Alert",
        "Product Updated",
        "New Product Added",
    ]
    assert activities[1]["product"] == "Silver"
    assert activities[1]["user"] == "John Manager"
    assert activities[0]["user"] == "System"
    assert activities[0]["timestamp"]
