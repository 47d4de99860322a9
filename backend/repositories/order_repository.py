from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from db.database import utcnow
from db.menu_item import MenuItem
from db.order import STATUS_CLOSED, STATUS_UPDATED, Order, OrderItem


class OrderRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, order_id: int) -> Optional[Order]:
        res = await self.db.execute(
            select(Order)
            .options(selectinload(Order.items))
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        return res.scalar_one_or_none()

    async def get_for_update(self, order_id: int) -> Optional[Order]:
        """Row-lock the order (no-op on SQLite) and return a fresh copy."""
        res = await self.db.execute(
            select(Order)
            .where(Order.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return res.scalar_one_or_none()

    async def list_all(self) -> List[Order]:
        res = await self.db.execute(
            select(Order).options(selectinload(Order.items)).order_by(Order.id.asc())
        )
        return list(res.scalars().all())

    async def add(self, order: Order) -> Order:
        self.db.add(order)
        await self.db.flush()
        return order

    async def delete(self, order: Order) -> None:
        await self.db.delete(order)
        await self.db.flush()

    async def line_items(self, order_id: int) -> List[Tuple[int, int]]:
        """(menu_item_id, quantity) for every line of the order."""
        res = await self.db.execute(
            select(OrderItem.menu_item_id, OrderItem.quantity)
            .where(OrderItem.order_id == order_id)
            .order_by(OrderItem.id.asc())
        )
        return [(int(m), int(q)) for m, q in res.all()]

    async def _set_status_unless_closed(self, order_id: int, status: str) -> bool:
        res = await self.db.execute(
            update(Order)
            .where(Order.id == order_id, Order.status != STATUS_CLOSED)
            .values(status=status, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return res.rowcount == 1

    async def mark_closed(self, order_id: int) -> bool:
        """Flip the order to closed unless it already is. False means somebody else won."""
        return await self._set_status_unless_closed(order_id, STATUS_CLOSED)

    async def mark_updated(self, order_id: int) -> bool:
        """Flag the order as updated unless it was closed in the meantime."""
        return await self._set_status_unless_closed(order_id, STATUS_UPDATED)

    async def ordered_items_count(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> Dict[str, int]:
        """Total ordered quantity per menu item name for orders created in [start, end]."""
        stmt = (
            select(MenuItem.name, func.sum(OrderItem.quantity))
            .join(OrderItem, OrderItem.menu_item_id == MenuItem.id)
            .join(Order, Order.id == OrderItem.order_id)
            .group_by(MenuItem.name)
            .order_by(MenuItem.name.asc())
        )
        if start is not None:
            stmt = stmt.where(Order.created_at >= start)
        if end is not None:
            stmt = stmt.where(Order.created_at <= end)
        res = await self.db.execute(stmt)
        return {name: int(total or 0) for name, total in res.all()}
