from dataclasses import asdict
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from db.database import get_async_session
from schemas.orders import (
    BulkOrderRequest,
    BulkOrderResponse,
    CloseOrderResponse,
    OrderCreate,
    OrderRead,
    OrderUpdate,
)
from services.bulk import BulkSettlementCoordinator
from services.order_service import OrderService
from services.settlement import OrderSettlementEngine

router = APIRouter()


@router.get("/numberOfOrderedItems", response_model=Dict[str, int])
async def number_of_ordered_items(
    startDate: Optional[str] = Query(None),
    endDate: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_async_session),
):
    return await OrderService(db).ordered_items_count(startDate, endDate)


@router.post("/batch-process", response_model=BulkOrderResponse)
async def batch_process_orders(payload: BulkOrderRequest, db: AsyncSession = Depends(get_async_session)):
    return await BulkSettlementCoordinator(db).process_bulk(payload.orders)


@router.post("", response_model=OrderRead, status_code=status.HTTP_201_CREATED)
async def create_order(payload: OrderCreate, db: AsyncSession = Depends(get_async_session)):
    order = await OrderService(db).create(payload)
    return OrderRead(**order.to_schema)


@router.get("", response_model=List[OrderRead])
async def list_orders(db: AsyncSession = Depends(get_async_session)):
    orders = await OrderService(db).list()
    return [OrderRead(**o.to_schema) for o in orders]


@router.get("/{order_id}", response_model=OrderRead)
async def get_order(order_id: int, db: AsyncSession = Depends(get_async_session)):
    order = await OrderService(db).get(order_id)
    return OrderRead(**order.to_schema)


@router.put("/{order_id}", response_model=OrderRead)
async def update_order(order_id: int, payload: OrderUpdate, db: AsyncSession = Depends(get_async_session)):
    order = await OrderService(db).update(order_id, payload)
    return OrderRead(**order.to_schema)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_order(order_id: int, db: AsyncSession = Depends(get_async_session)):
    await OrderService(db).delete(order_id)


@router.post("/{order_id}/close", response_model=CloseOrderResponse)
async def close_order(order_id: int, db: AsyncSession = Depends(get_async_session)):
    result = await OrderSettlementEngine(db).close_order(order_id)
    return {
        "order": OrderRead(**result.order.to_schema),
        "inventory_updates": [asdict(u) for u in result.usages],
    }
