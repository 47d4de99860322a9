from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from db.database import get_async_session
from schemas.inventory import InventoryItemCreate, InventoryItemOut, InventoryItemUpdate, LeftoversPage
from services.inventory_service import InventoryService

router = APIRouter()


@router.get("/getLeftOvers", response_model=LeftoversPage)
async def get_leftovers(
    request: Request,
    sortBy: str = Query("quantity"),
    page: int = Query(1),
    pageSize: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_async_session),
):
    page_size = pageSize if pageSize is not None else request.app.state.settings.leftovers_page_size
    return await InventoryService(db).leftovers(sortBy, page, page_size)


@router.post("", response_model=InventoryItemOut, status_code=status.HTTP_201_CREATED)
async def create_inventory_item(payload: InventoryItemCreate, db: AsyncSession = Depends(get_async_session)):
    item = await InventoryService(db).create(payload)
    return InventoryItemOut(**item.to_schema)


@router.get("", response_model=List[InventoryItemOut])
async def list_inventory(db: AsyncSession = Depends(get_async_session)):
    items = await InventoryService(db).list()
    return [InventoryItemOut(**i.to_schema) for i in items]


@router.get("/{item_id}", response_model=InventoryItemOut)
async def get_inventory_item(item_id: int, db: AsyncSession = Depends(get_async_session)):
    item = await InventoryService(db).get(item_id)
    return InventoryItemOut(**item.to_schema)


@router.put("/{item_id}", response_model=InventoryItemOut)
async def update_inventory_item(
    item_id: int,
    payload: InventoryItemUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    item = await InventoryService(db).update(item_id, payload)
    return InventoryItemOut(**item.to_schema)


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_inventory_item(item_id: int, db: AsyncSession = Depends(get_async_session)):
    await InventoryService(db).delete(item_id)
