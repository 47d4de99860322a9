import pytest
from sqlalchemy import func, select

from core.exceptions import MenuItemNotFound, TransactionFailure, ValidationError
from db.order import STATUS_CLOSED, STATUS_OPEN, Order
from schemas.orders import OrderCreate, OrderItemIn
from services.bulk import BulkSettlementCoordinator
from services.settlement import OrderSettlementEngine


def _request(name, product_id, quantity, **instructions):
    return OrderCreate(
        customer_name=name,
        items=[OrderItemIn(product_id=product_id, quantity=quantity)],
        special_instructions=instructions,
    )


async def _order_count(session_maker):
    async with session_maker() as s:
        return (await s.execute(select(func.count(Order.id)))).scalar_one()


@pytest.mark.asyncio
async def test_shortage_rejects_only_that_order(session, session_maker, make_shop, stock_of):
    shop = await make_shop(milk=500, coffee=100)
    requests = [
        _request("Alice", shop["latte"], 1),
        _request("Bob", shop["latte"], 2),
        _request("Carol", shop["latte"], 1, temperature="hot"),
    ]

    response = await BulkSettlementCoordinator(session).process_bulk(requests)

    statuses = [(p.customer_name, p.status, p.reason) for p in response.processed_orders]
    assert statuses == [
        ("Alice", "accepted", None),
        ("Bob", "rejected", "insufficient_inventory"),
        ("Carol", "accepted", None),
    ]
    assert response.processed_orders[0].total == 4.0
    assert response.processed_orders[1].total is None

    summary = response.summary
    assert summary.total_orders == 3
    assert summary.accepted == 2
    assert summary.rejected == 1
    assert summary.total_revenue == 8.0
    assert [u.ingredient_id for u in summary.inventory_updates] == [
        shop["milk"], shop["coffee"], shop["milk"], shop["coffee"],
    ]
    assert [u.remaining for u in summary.inventory_updates] == [300, 82, 100, 64]

    assert await stock_of(shop["milk"]) == 100
    assert await stock_of(shop["coffee"]) == 64

    async with session_maker() as s:
        rejected = await s.get(Order, response.processed_orders[1].order_id)
        accepted = await s.get(Order, response.processed_orders[2].order_id)
        assert rejected.status == STATUS_OPEN
        assert accepted.status == STATUS_CLOSED


@pytest.mark.asyncio
async def test_invalid_request_aborts_before_any_order_is_written(session, session_maker, make_shop):
    shop = await make_shop()
    requests = [
        _request("Alice", shop["latte"], 1),
        _request("Bob", shop["latte"], 1, sugar="lots"),
    ]

    with pytest.raises(ValidationError):
        await BulkSettlementCoordinator(session).process_bulk(requests)

    assert await _order_count(session_maker) == 0


@pytest.mark.asyncio
async def test_unknown_product_aborts_bulk(session, session_maker, make_shop, stock_of):
    shop = await make_shop()
    requests = [_request("Alice", shop["latte"], 1), _request("Bob", 12345, 1)]

    with pytest.raises(MenuItemNotFound):
        await BulkSettlementCoordinator(session).process_bulk(requests)

    assert await _order_count(session_maker) == 0
    assert await stock_of(shop["milk"]) == 500


@pytest.mark.asyncio
async def test_other_settlement_errors_propagate(session, make_shop, monkeypatch):
    shop = await make_shop()

    async def broken_close(self, order_id):
        raise TransactionFailure("database went away")

    monkeypatch.setattr(OrderSettlementEngine, "close_order", broken_close)

    with pytest.raises(TransactionFailure):
        await BulkSettlementCoordinator(session).process_bulk([_request("Alice", shop["latte"], 1)])


@pytest.mark.asyncio
async def test_empty_batch(session):
    response = await BulkSettlementCoordinator(session).process_bulk([])
    assert response.processed_orders == []
    assert response.summary.total_orders == 0
    assert response.summary.total_revenue == 0
