from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from db.inventory import InventoryItem  # noqa: F401  (MenuItemIngredient.ingredient target)
from db.menu_item import MenuItem, MenuItemIngredient
from db.order import OrderItem


class MenuRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, menu_item_id: int) -> Optional[MenuItem]:
        res = await self.db.execute(
            select(MenuItem)
            .options(selectinload(MenuItem.ingredients))
            .where(MenuItem.id == menu_item_id)
            .execution_options(populate_existing=True)
        )
        return res.scalar_one_or_none()

    async def list_all(self) -> List[MenuItem]:
        res = await self.db.execute(
            select(MenuItem).options(selectinload(MenuItem.ingredients)).order_by(MenuItem.id.asc())
        )
        return list(res.scalars().all())

    async def get_by_name(self, name: str, exclude_id: Optional[int] = None) -> Optional[MenuItem]:
        stmt = select(MenuItem).where(func.lower(MenuItem.name) == name.strip().lower())
        if exclude_id is not None:
            stmt = stmt.where(MenuItem.id != exclude_id)
        res = await self.db.execute(stmt)
        return res.scalars().first()

    async def prices(self, ids: Iterable[int]) -> Dict[int, float]:
        """Current catalog price per menu item id; unknown ids are absent."""
        ids = list(set(ids))
        if not ids:
            return {}
        res = await self.db.execute(select(MenuItem.id, MenuItem.price).where(MenuItem.id.in_(ids)))
        return {row.id: float(row.price) for row in res.all()}

    async def recipes(self, ids: Iterable[int]) -> Dict[int, List[Tuple[int, float]]]:
        """(ingredient_id, per-unit quantity) lists keyed by menu item id, in recipe order."""
        ids = list(set(ids))
        if not ids:
            return {}
        res = await self.db.execute(
            select(MenuItemIngredient.menu_item_id, MenuItemIngredient.ingredient_id, MenuItemIngredient.quantity)
            .where(MenuItemIngredient.menu_item_id.in_(ids))
            .order_by(MenuItemIngredient.menu_item_id, MenuItemIngredient.position, MenuItemIngredient.id)
        )
        out: Dict[int, List[Tuple[int, float]]] = {}
        for menu_item_id, ingredient_id, quantity in res.all():
            out.setdefault(menu_item_id, []).append((ingredient_id, float(quantity)))
        return out

    async def add(self, item: MenuItem) -> MenuItem:
        self.db.add(item)
        await self.db.flush()
        return item

    async def delete(self, item: MenuItem) -> None:
        await self.db.delete(item)
        await self.db.flush()

    async def is_ordered(self, menu_item_id: int) -> bool:
        res = await self.db.execute(
            select(func.count(OrderItem.id)).where(OrderItem.menu_item_id == menu_item_id)
        )
        return int(res.scalar_one() or 0) > 0
