import calendar
from datetime import datetime, timezone

import pytest
import pytest_asyncio


@pytest_asyncio.fixture
async def sales(client, api_shop):
    """Two orders: Alice (2 lattes, closed) and Bob (1 latte, still open)."""
    alice = (await client.post("/orders", json={
        "customer_name": "Alice", "items": [{"product_id": api_shop["latte"], "quantity": 2}],
    })).json()
    bob = (await client.post("/orders", json={
        "customer_name": "Bob", "items": [{"product_id": api_shop["latte"], "quantity": 1}],
    })).json()
    assert (await client.post(f"/orders/{alice['order_id']}/close")).status_code == 200
    return {"alice": alice["order_id"], "bob": bob["order_id"]}


@pytest.mark.asyncio
async def test_total_sales_counts_closed_orders_only(client, sales):
    res = await client.get("/reports/total-sales")
    assert res.status_code == 200
    assert res.json() == {"total_sales": 8.0}


@pytest.mark.asyncio
async def test_total_sales_empty(client):
    assert (await client.get("/reports/total-sales")).json() == {"total_sales": 0.0}


@pytest.mark.asyncio
async def test_popular_items(client, api_shop, sales):
    espresso = (await client.post("/menu", json={
        "name": "Espresso",
        "description": "Single shot of espresso",
        "price": 2.5,
        "ingredients": [{"ingredient_id": api_shop["coffee"], "quantity": 18}],
    })).json()
    await client.post("/orders", json={"customer_name": "Carol",
                                       "items": [{"product_id": espresso["product_id"], "quantity": 1}]})

    res = await client.get("/reports/popular-items")
    assert res.status_code == 200
    assert [(p["name"], p["ordered_quantity"]) for p in res.json()] == [("Latte", 3), ("Espresso", 1)]

    res = await client.get("/reports/popular-items", params={"limit": 1})
    assert [p["name"] for p in res.json()] == ["Latte"]


@pytest.mark.asyncio
async def test_ordered_items_by_period(client, sales):
    now = datetime.now(timezone.utc)
    month_name = calendar.month_name[now.month].lower()

    res = await client.get("/reports/orderedItemsByPeriod", params={"period": "day", "month": month_name,
                                                                    "year": now.year})
    assert res.status_code == 200, res.text
    assert res.json() == {"period": "day", "month": month_name, "year": now.year,
                          "orderedItems": [{str(now.day): 3}]}

    res = await client.get("/reports/orderedItemsByPeriod", params={"period": "month", "year": now.year})
    assert res.json() == {"period": "month", "year": now.year, "orderedItems": [{month_name: 3}]}

    res = await client.get("/reports/orderedItemsByPeriod", params={"period": "month", "year": now.year - 5})
    assert res.json()["orderedItems"] == []


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{"period": "week"}, {"period": "day", "month": "smarch"}])
async def test_ordered_items_by_period_bad_params(client, params):
    res = await client.get("/reports/orderedItemsByPeriod", params=params)
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_search(client, sales):
    res = await client.get("/reports/search", params={"q": "latte"})
    assert res.status_code == 200
    body = res.json()
    assert [m["name"] for m in body["menu_items"]] == ["Latte"]
    assert [o["customer_name"] for o in body["orders"]] == ["Alice", "Bob"]
    assert body["orders"][0]["items"] == ["Latte"]
    assert body["total_matches"] == 3

    res = await client.get("/reports/search", params={"q": "alice", "filter": "orders"})
    body = res.json()
    assert body["menu_items"] == []
    assert [o["id"] for o in body["orders"]] == [sales["alice"]]

    res = await client.get("/reports/search", params={"q": "latte", "filter": "orders", "maxPrice": 5})
    assert [o["customer_name"] for o in res.json()["orders"]] == ["Bob"]


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [
    {},
    {"q": "   "},
    {"q": "latte", "filter": "drinks"},
    {"q": "latte", "minPrice": 10, "maxPrice": 5},
])
async def test_search_bad_params(client, params):
    res = await client.get("/reports/search", params=params)
    assert res.status_code == 400
