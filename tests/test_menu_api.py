import pytest


def _menu_payload(**overrides):
    payload = {
        "name": "Mocha",
        "description": "Espresso with chocolate and steamed milk",
        "price": 4.75,
        "categories": ["coffee", " ", "hot"],
        "ingredients": [],
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_menu_crud(client, api_shop):
    recipe = [{"ingredient_id": api_shop["coffee"], "quantity": 18}, {"ingredient_id": api_shop["milk"], "quantity": 150}]
    res = await client.post("/menu", json=_menu_payload(ingredients=recipe))
    assert res.status_code == 201, res.text
    mocha = res.json()
    assert mocha["categories"] == ["coffee", "hot"]
    assert mocha["ingredients"] == recipe

    res = await client.put(f"/menu/{mocha['product_id']}", json=_menu_payload(
        price=5.0, ingredients=[{"ingredient_id": api_shop["milk"], "quantity": 180}],
    ))
    assert res.status_code == 200, res.text
    assert res.json()["price"] == 5.0
    assert res.json()["ingredients"] == [{"ingredient_id": api_shop["milk"], "quantity": 180}]

    names = [m["name"] for m in (await client.get("/menu")).json()]
    assert names == ["Latte", "Mocha"]

    assert (await client.delete(f"/menu/{mocha['product_id']}")).status_code == 204
    assert (await client.get(f"/menu/{mocha['product_id']}")).status_code == 404


@pytest.mark.asyncio
async def test_unknown_ingredient_rejected(client, api_shop):
    res = await client.post("/menu", json=_menu_payload(ingredients=[{"ingredient_id": 999, "quantity": 1}]))
    assert res.status_code == 400
    assert "999" in res.json()["detail"]


@pytest.mark.asyncio
@pytest.mark.parametrize("overrides", [
    {"description": "short"},
    {"description": "<b>bold</b> chocolate espresso"},
    {"price": 0},
    {"name": "--Mocha"},
    {"ingredients": []},
])
async def test_invalid_menu_item(client, api_shop, overrides):
    payload = _menu_payload(ingredients=[{"ingredient_id": api_shop["coffee"], "quantity": 18}])
    payload.update(overrides)
    res = await client.post("/menu", json=payload)
    assert res.status_code == 400


@pytest.mark.asyncio
async def test_duplicate_menu_name(client, api_shop):
    res = await client.post("/menu", json=_menu_payload(
        name="latte", ingredients=[{"ingredient_id": api_shop["coffee"], "quantity": 18}],
    ))
    assert res.status_code == 409


@pytest.mark.asyncio
async def test_ordered_menu_item_cannot_be_deleted(client, api_shop):
    await client.post("/orders", json={"customer_name": "Alice", "items": [{"product_id": api_shop["latte"], "quantity": 1}]})
    res = await client.delete(f"/menu/{api_shop['latte']}")
    assert res.status_code == 409
