"""Order settlement: close an order and consume its ingredients exactly once.

Everything from locking the order to the last ingredient decrement runs in one
transaction on the caller's session. Any failure, cancellation included,
rolls the whole call back: stock and order status stay as they were.

Lock order is always the order row first, then inventory rows by ascending
id. SQLite ignores FOR UPDATE, so the claim and every decrement are also
guarded updates that report zero rows when somebody else got there first.
The claim comes before anything is read from the order's lines; a shortage
found later rolls it back with the rest.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import (
    InsufficientInventory,
    InventoryItemNotFound,
    OrderAlreadyClosed,
    OrderNotFound,
    Shortage,
    TransactionFailure,
)
from db.database import transaction
from db.order import Order
from repositories.inventory_repository import InventoryRepository
from repositories.menu_repository import MenuRepository
from repositories.order_repository import OrderRepository

logger = logging.getLogger(__name__)


@dataclass
class IngredientUsage:
    ingredient_id: int
    name: str
    quantity_used: float
    remaining: float
    low_stock: bool = False


@dataclass
class SettlementResult:
    order: Order
    usages: List[IngredientUsage] = field(default_factory=list)


def required_quantities(
    lines: Iterable[Tuple[int, int]], recipes: Dict[int, List[Tuple[int, float]]]
) -> Dict[int, float]:
    """Sum per-unit recipe quantities times ordered quantity, per ingredient id."""
    required: Dict[int, float] = {}
    for menu_item_id, ordered in lines:
        for ingredient_id, per_unit in recipes.get(menu_item_id, []):
            required[ingredient_id] = required.get(ingredient_id, 0.0) + per_unit * ordered
    return required


class OrderSettlementEngine:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.orders = OrderRepository(db)
        self.menu = MenuRepository(db)
        self.inventory = InventoryRepository(db)

    async def close_order(self, order_id: int) -> SettlementResult:
        """Close `order_id`, deducting every ingredient its lines consume.

        Raises OrderNotFound, OrderAlreadyClosed, InsufficientInventory or
        TransactionFailure. On any of them nothing has been written.
        """
        try:
            async with transaction(self.db):
                order = await self.orders.get_for_update(order_id)
                if order is None:
                    raise OrderNotFound(order_id)
                if order.is_closed or not await self.orders.mark_closed(order_id):
                    raise OrderAlreadyClosed(order_id)

                # Under the claim the lines cannot change until commit
                lines = await self.orders.line_items(order_id)
                recipes = await self.menu.recipes(m for m, _ in lines)
                required = required_quantities(lines, recipes)

                names = await self._check_stock(required)
                usages = await self._consume(required, names)

                closed = await self.orders.get(order_id)
        except SQLAlchemyError as exc:
            logger.error("settlement of order %s aborted by the database: %s", order_id, exc)
            raise TransactionFailure(f"could not close order with ID {order_id}", cause=exc) from exc

        logger.info("order %s closed, %d ingredient(s) consumed", order_id, len(usages))
        return SettlementResult(order=closed, usages=usages)

    async def _check_stock(self, required: Dict[int, float]) -> Dict[int, str]:
        """Lock the ingredient rows and fail with every shortage found. Returns names by id."""
        rows = await self.inventory.lock_for_settlement(required)
        shortages: List[Shortage] = []
        for ingredient_id in sorted(required):
            row = rows.get(ingredient_id)
            if row is None:
                raise InventoryItemNotFound(ingredient_id)
            available = float(row.quantity)
            if available < required[ingredient_id]:
                shortages.append(Shortage(ingredient_id, row.name, required[ingredient_id], available))
        if shortages:
            raise InsufficientInventory(shortages)
        return {i: rows[i].name for i in required}

    async def _consume(self, required: Dict[int, float], names: Dict[int, str]) -> List[IngredientUsage]:
        usages: List[IngredientUsage] = []
        for ingredient_id in sorted(required):
            amount = required[ingredient_id]
            name = names[ingredient_id]
            if not await self.inventory.decrement(ingredient_id, amount):
                available, _ = await self.inventory.read_level(ingredient_id)
                raise InsufficientInventory([Shortage(ingredient_id, name, amount, available)])

            remaining, threshold = await self.inventory.read_level(ingredient_id)
            low = threshold is not None and remaining <= threshold
            if low:
                logger.warning(
                    "low stock: %s (ID %s) at %g, reorder threshold %g",
                    name, ingredient_id, remaining, threshold,
                )
            usages.append(IngredientUsage(ingredient_id, name, amount, remaining, low))
        return usages
