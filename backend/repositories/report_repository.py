from typing import List, Optional, Sequence, Tuple

from sqlalchemy import extract, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from db.menu_item import MenuItem
from db.order import STATUS_CLOSED, Order, OrderItem


def _patterns(words: Sequence[str]) -> List[str]:
    return [f"%{w}%" for w in words]


class ReportRepository:
    """Read-only aggregate queries over orders and the menu."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def total_sales(self) -> float:
        res = await self.db.execute(
            select(func.coalesce(func.sum(Order.total_amount), 0.0)).where(Order.status == STATUS_CLOSED)
        )
        return float(res.scalar_one() or 0.0)

    async def popular_items(self, limit: int) -> List[Tuple[MenuItem, int]]:
        ordered = func.sum(OrderItem.quantity).label("ordered_quantity")
        res = await self.db.execute(
            select(MenuItem, ordered)
            .join(OrderItem, OrderItem.menu_item_id == MenuItem.id)
            .group_by(MenuItem.id)
            .order_by(ordered.desc(), MenuItem.id.asc())
            .limit(limit)
        )
        return [(item, int(qty or 0)) for item, qty in res.all()]

    async def ordered_by_day(self, month: int, year: int) -> List[Tuple[int, int]]:
        day = extract("day", Order.created_at)
        res = await self.db.execute(
            select(day, func.sum(OrderItem.quantity))
            .join(Order, Order.id == OrderItem.order_id)
            .where(extract("month", Order.created_at) == month, extract("year", Order.created_at) == year)
            .group_by(day)
            .order_by(day)
        )
        return [(int(d), int(q or 0)) for d, q in res.all()]

    async def ordered_by_month(self, year: int) -> List[Tuple[int, int]]:
        month = extract("month", Order.created_at)
        res = await self.db.execute(
            select(month, func.sum(OrderItem.quantity))
            .join(Order, Order.id == OrderItem.order_id)
            .where(extract("year", Order.created_at) == year)
            .group_by(month)
            .order_by(month)
        )
        return [(int(m), int(q or 0)) for m, q in res.all()]

    async def search_menu(
        self, words: Sequence[str], min_price: float, max_price: Optional[float]
    ) -> List[MenuItem]:
        pats = _patterns(words)
        stmt = select(MenuItem).where(
            or_(*[MenuItem.name.ilike(p) for p in pats], *[MenuItem.description.ilike(p) for p in pats]),
            MenuItem.price >= min_price,
        )
        if max_price is not None:
            stmt = stmt.where(MenuItem.price <= max_price)
        res = await self.db.execute(stmt.order_by(MenuItem.id.asc()))
        return list(res.scalars().all())

    async def search_orders(
        self, words: Sequence[str], min_price: float, max_price: Optional[float]
    ) -> List[Order]:
        pats = _patterns(words)
        by_item = (
            select(OrderItem.order_id)
            .join(MenuItem, MenuItem.id == OrderItem.menu_item_id)
            .where(or_(*[MenuItem.name.ilike(p) for p in pats]))
        )
        stmt = (
            select(Order)
            .options(selectinload(Order.items).selectinload(OrderItem.menu_item))
            .where(
                or_(*[Order.customer_name.ilike(p) for p in pats], Order.id.in_(by_item)),
                Order.total_amount >= min_price,
            )
        )
        if max_price is not None:
            stmt = stmt.where(Order.total_amount <= max_price)
        res = await self.db.execute(stmt.order_by(Order.id.asc()))
        return list(res.scalars().all())
