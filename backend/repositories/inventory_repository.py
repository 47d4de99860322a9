from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from db.database import utcnow
from db.inventory import InventoryItem
from db.menu_item import MenuItemIngredient


class InventoryRepository:
    """Data access for the `inventory` table.

    The settlement methods (`lock_for_settlement`, `decrement`, `read_level`)
    must be called inside an open transaction; they never commit.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, item_id: int) -> Optional[InventoryItem]:
        res = await self.db.execute(select(InventoryItem).where(InventoryItem.id == item_id))
        return res.scalar_one_or_none()

    async def list_all(self) -> List[InventoryItem]:
        res = await self.db.execute(select(InventoryItem).order_by(InventoryItem.id.asc()))
        return list(res.scalars().all())

    async def get_by_name(self, name: str, exclude_id: Optional[int] = None) -> Optional[InventoryItem]:
        stmt = select(InventoryItem).where(func.lower(InventoryItem.name) == name.strip().lower())
        if exclude_id is not None:
            stmt = stmt.where(InventoryItem.id != exclude_id)
        res = await self.db.execute(stmt)
        return res.scalars().first()

    async def existing_ids(self, ids: Iterable[int]) -> set[int]:
        ids = list(set(ids))
        if not ids:
            return set()
        res = await self.db.execute(select(InventoryItem.id).where(InventoryItem.id.in_(ids)))
        return {row[0] for row in res.all()}

    async def add(self, item: InventoryItem) -> InventoryItem:
        self.db.add(item)
        await self.db.flush()
        return item

    async def delete(self, item: InventoryItem) -> None:
        await self.db.delete(item)
        await self.db.flush()

    async def is_used_in_recipes(self, item_id: int) -> bool:
        res = await self.db.execute(
            select(func.count(MenuItemIngredient.id)).where(MenuItemIngredient.ingredient_id == item_id)
        )
        return int(res.scalar_one() or 0) > 0

    async def leftovers(self, sort_by: str, page: int, page_size: int) -> Tuple[List[InventoryItem], int]:
        order_col = InventoryItem.quantity.desc() if sort_by == "quantity" else func.lower(InventoryItem.name).asc()
        total = int((await self.db.execute(select(func.count(InventoryItem.id)))).scalar_one() or 0)
        res = await self.db.execute(
            select(InventoryItem)
            .order_by(order_col, InventoryItem.id.asc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        return list(res.scalars().all()), total

    # --- settlement -------------------------------------------------------

    async def lock_for_settlement(self, ids: Iterable[int]) -> Dict[int, InventoryItem]:
        """Row-lock the given ingredients in ascending id order and return fresh rows.

        Ascending order keeps two settlements with overlapping recipes from
        deadlocking. `populate_existing` forces a re-read even when the rows
        are already in this session's identity map.
        """
        ids = sorted(set(ids))
        if not ids:
            return {}
        res = await self.db.execute(
            select(InventoryItem)
            .where(InventoryItem.id.in_(ids))
            .order_by(InventoryItem.id.asc())
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return {it.id: it for it in res.scalars().all()}

    async def decrement(self, item_id: int, amount: float) -> bool:
        """Subtract `amount` unless that would drive the stock negative.

        Returns False when the guard rejected the update (stock changed under us).
        """
        res = await self.db.execute(
            update(InventoryItem)
            .where(InventoryItem.id == item_id, InventoryItem.quantity >= amount)
            .values(quantity=InventoryItem.quantity - amount, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return res.rowcount == 1

    async def read_level(self, item_id: int) -> Tuple[float, Optional[float]]:
        """Current (quantity, reorder_threshold) straight from the database."""
        res = await self.db.execute(
            select(InventoryItem.quantity, InventoryItem.reorder_threshold).where(InventoryItem.id == item_id)
        )
        quantity, threshold = res.one()
        return float(quantity), (float(threshold) if threshold is not None else None)
