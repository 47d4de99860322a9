import logging
from datetime import datetime, time
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import MenuItemNotFound, OrderAlreadyClosed, OrderNotFound, ValidationError
from core.validation import validate_name, validate_special_instructions
from db.database import transaction
from db.order import STATUS_OPEN, Order, OrderItem
from repositories.menu_repository import MenuRepository
from repositories.order_repository import OrderRepository
from schemas.orders import OrderCreate

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


def merge_lines(data: OrderCreate) -> Dict[int, int]:
    """product_id -> total quantity, keeping first-seen order."""
    merged: Dict[int, int] = {}
    for line in data.items:
        if line.quantity <= 0:
            raise ValidationError("item quantity must be greater than zero")
        merged[line.product_id] = merged.get(line.product_id, 0) + line.quantity
    return merged


class OrderService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = OrderRepository(db)
        self.menu = MenuRepository(db)

    async def _priced_lines(self, data: OrderCreate) -> List[OrderItem]:
        lines = merge_lines(data)
        prices = await self.menu.prices(lines)
        for product_id in lines:
            if product_id not in prices:
                raise MenuItemNotFound(product_id)
        return [
            OrderItem(menu_item_id=product_id, quantity=qty, price=prices[product_id])
            for product_id, qty in lines.items()
        ]

    async def prepare(self, data: OrderCreate) -> Order:
        """Validate a new order and price it against the current menu. Nothing is written."""
        name = validate_name(data.customer_name, "customer_name")
        instructions = validate_special_instructions(data.special_instructions)
        items = await self._priced_lines(data)
        return Order(
            customer_name=name,
            status=STATUS_OPEN,
            special_instructions=instructions,
            total_amount=order_total(items),
            items=items,
        )

    async def save_new(self, order: Order) -> Order:
        async with transaction(self.db):
            await self.repo.add(order)
        logger.info(
            "order %s created for %s: %d line(s), total %.2f",
            order.id, order.customer_name, len(order.items), order.total_amount,
        )
        return order

    async def create(self, data: OrderCreate) -> Order:
        return await self.save_new(await self.prepare(data))

    async def list(self) -> List[Order]:
        return await self.repo.list_all()

    async def get(self, order_id: int) -> Order:
        order = await self.repo.get(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order

    async def update(self, order_id: int, data: OrderCreate) -> Order:
        name = validate_name(data.customer_name, "customer_name")
        instructions = validate_special_instructions(data.special_instructions)

        async with transaction(self.db):
            locked = await self.repo.get_for_update(order_id)
            if locked is None:
                raise OrderNotFound(order_id)
            if locked.is_closed or not await self.repo.mark_updated(order_id):
                raise OrderAlreadyClosed(order_id)
            order = await self.get(order_id)
            items = await self._priced_lines(data)

            order.customer_name = name
            order.special_instructions = instructions
            order.total_amount = order_total(items)
            # Flush the removals first; (order_id, menu_item_id) is unique
            order.items.clear()
            await self.db.flush()
            order.items.extend(items)
            await self.db.flush()

        logger.info("order %s updated, total %.2f", order_id, order.total_amount)
        return order

    async def delete(self, order_id: int) -> None:
        async with transaction(self.db):
            order = await self.get(order_id)
            await self.repo.delete(order)
        logger.info("order %s deleted", order_id)

    async def ordered_items_count(self, start_date: Optional[str], end_date: Optional[str]) -> Dict[str, int]:
        start = _parse_date(start_date, "startDate")
        end = _parse_date(end_date, "endDate")
        if end is not None:
            end = datetime.combine(end.date(), time.max)
        if start is not None and end is not None and start > end:
            raise ValidationError("startDate cannot be after endDate")
        return await self.repo.ordered_items_count(start, end)


def order_total(items: List[OrderItem]) -> float:
    return round(sum(float(i.price) * i.quantity for i in items), 2)


def _parse_date(value: Optional[str], field: str) -> Optional[datetime]:
    if value is None or not value.strip():
        return None
    try:
        return datetime.strptime(value.strip(), DATE_FORMAT)
    except ValueError as exc:
        raise ValidationError(f"invalid {field} format, expected YYYY-MM-DD") from exc
