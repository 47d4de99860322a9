from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from db.database import get_async_session
from schemas.menu import MenuItemCreate, MenuItemOut, MenuItemUpdate
from services.menu_service import MenuService

router = APIRouter()


@router.post("", response_model=MenuItemOut, status_code=status.HTTP_201_CREATED)
async def create_menu_item(payload: MenuItemCreate, db: AsyncSession = Depends(get_async_session)):
    item = await MenuService(db).create(payload)
    return MenuItemOut(**item.to_schema)


@router.get("", response_model=List[MenuItemOut])
async def list_menu_items(db: AsyncSession = Depends(get_async_session)):
    items = await MenuService(db).list()
    return [MenuItemOut(**m.to_schema) for m in items]


@router.get("/{menu_item_id}", response_model=MenuItemOut)
async def get_menu_item(menu_item_id: int, db: AsyncSession = Depends(get_async_session)):
    item = await MenuService(db).get(menu_item_id)
    return MenuItemOut(**item.to_schema)


@router.put("/{menu_item_id}", response_model=MenuItemOut)
async def update_menu_item(
    menu_item_id: int,
    payload: MenuItemUpdate,
    db: AsyncSession = Depends(get_async_session),
):
    item = await MenuService(db).update(menu_item_id, payload)
    return MenuItemOut(**item.to_schema)


@router.delete("/{menu_item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_menu_item(menu_item_id: int, db: AsyncSession = Depends(get_async_session)):
    await MenuService(db).delete(menu_item_id)
