import calendar
from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import ValidationError
from repositories.report_repository import ReportRepository

SEARCH_FILTERS = ("menu", "orders")
PERIODS = ("day", "month")

_MONTHS = {calendar.month_name[i].lower(): i for i in range(1, 13)}


def parse_month(month: Optional[str]) -> int:
    if not month:
        return datetime.now().month
    value = month.strip().lower()
    if value.isdigit() and 1 <= int(value) <= 12:
        return int(value)
    if value not in _MONTHS:
        raise ValidationError(f"invalid month: {month}")
    return _MONTHS[value]


def parse_filters(raw: Optional[str]) -> set:
    if not raw or raw.strip().lower() == "all":
        return set(SEARCH_FILTERS)
    parts = {p.strip().lower() for p in raw.split(",") if p.strip()}
    unknown = parts - set(SEARCH_FILTERS) - {"all"}
    if unknown:
        raise ValidationError(f"invalid filter: {', '.join(sorted(unknown))}")
    if "all" in parts:
        return set(SEARCH_FILTERS)
    return parts


class ReportService:

    def __init__(self, db: AsyncSession):
        self.repo = ReportRepository(db)

    async def total_sales(self) -> dict:
        return {"total_sales": await self.repo.total_sales()}

    async def popular_items(self, limit: int = 10) -> list:
        if limit < 1:
            raise ValidationError("limit must be a positive number")
        rows = await self.repo.popular_items(limit)
        return [
            {"product_id": item.id, "name": item.name, "price": float(item.price), "ordered_quantity": qty}
            for item, qty in rows
        ]

    async def ordered_items_by_period(
        self, period: str, month: Optional[str] = None, year: Optional[int] = None
    ) -> dict:
        period = (period or "").strip().lower()
        if period not in PERIODS:
            raise ValidationError("period must be 'day' or 'month'")
        year = year or datetime.now().year
        if year < 1:
            raise ValidationError(f"invalid year: {year}")

        if period == "day":
            month_no = parse_month(month)
            rows = await self.repo.ordered_by_day(month_no, year)
            return {
                "period": period,
                "month": calendar.month_name[month_no].lower(),
                "year": year,
                "orderedItems": [{str(day): qty} for day, qty in rows],
            }

        rows = await self.repo.ordered_by_month(year)
        return {
            "period": period,
            "year": year,
            "orderedItems": [{calendar.month_name[m].lower(): qty} for m, qty in rows],
        }

    async def search(
        self,
        q: Optional[str],
        filters: Optional[str] = None,
        min_price: float = 0,
        max_price: Optional[float] = None,
    ) -> dict:
        words = (q or "").split()
        if not words:
            raise ValidationError("search query cannot be empty")
        if min_price < 0 or (max_price is not None and max_price < 0):
            raise ValidationError("price bounds cannot be negative")
        if max_price is not None and min_price > max_price:
            raise ValidationError("minPrice cannot be greater than maxPrice")
        targets = parse_filters(filters)

        menu_hits = []
        if "menu" in targets:
            menu_hits = [
                {"id": m.id, "name": m.name, "description": m.description, "price": float(m.price)}
                for m in await self.repo.search_menu(words, min_price, max_price)
            ]
        order_hits = []
        if "orders" in targets:
            order_hits = [
                {
                    "id": o.id,
                    "customer_name": o.customer_name,
                    "items": [oi.menu_item.name for oi in o.items],
                    "total": float(o.total_amount),
                }
                for o in await self.repo.search_orders(words, min_price, max_price)
            ]
        return {
            "menu_items": menu_hits,
            "orders": order_hits,
            "total_matches": len(menu_hits) + len(order_hits),
        }
