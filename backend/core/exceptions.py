"""Service-level exceptions.

Routers never catch these one by one: `main.create_app` registers a handler
per family that turns them into a JSON `{"detail": ...}` response.
"""

from dataclasses import dataclass
from typing import List, Optional


class CoffeeShopError(Exception):
    """Base class for all business errors."""


class ValidationError(CoffeeShopError):
    """Input rejected before touching the database."""


class ConflictError(CoffeeShopError):
    """The write would break a uniqueness or reference rule."""


class NotFoundError(CoffeeShopError):
    entity = "entity"

    def __init__(self, entity_id: int):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} with ID {entity_id} not found")


class OrderNotFound(NotFoundError):
    entity = "order"


class MenuItemNotFound(NotFoundError):
    entity = "menu item"


class InventoryItemNotFound(NotFoundError):
    entity = "inventory item"


class OrderAlreadyClosed(CoffeeShopError):
    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"order with ID {order_id} is already closed")


@dataclass(frozen=True)
class Shortage:
    ingredient_id: int
    name: str
    required: float
    available: float


class InsufficientInventory(CoffeeShopError):
    """Stock is lower than what the order needs.

    `ingredient_id`, `required` and `available` describe the first deficient
    ingredient (lowest id); `shortages` lists every one of them.
    """

    def __init__(self, shortages: List[Shortage]):
        if not shortages:
            raise ValueError("InsufficientInventory needs at least one shortage")
        self.shortages = list(shortages)
        first = self.shortages[0]
        self.ingredient_id = first.ingredient_id
        self.name = first.name
        self.required = first.required
        self.available = first.available
        super().__init__(
            f"insufficient inventory for ingredient ID {first.ingredient_id} "
            f"(available: {first.available:g}, required: {first.required:g})"
        )


class TransactionFailure(CoffeeShopError):
    """The store aborted the transaction; nothing was persisted."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)
