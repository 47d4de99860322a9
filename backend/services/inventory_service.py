import logging
import math
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import ConflictError, InventoryItemNotFound, ValidationError
from core.validation import validate_name, validate_quantity
from db.database import transaction
from db.inventory import InventoryItem
from repositories.inventory_repository import InventoryRepository
from schemas.inventory import InventoryItemCreate, InventoryItemUpdate

logger = logging.getLogger(__name__)

LEFTOVERS_SORT_KEYS = ("quantity", "name")


class InventoryService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = InventoryRepository(db)

    async def create(self, data: InventoryItemCreate) -> InventoryItem:
        name = validate_name(data.name)
        quantity = validate_quantity(data.quantity)
        threshold = None
        if data.reorder_threshold is not None:
            threshold = validate_quantity(data.reorder_threshold, "reorder_threshold")

        async with transaction(self.db):
            if await self.repo.get_by_name(name):
                raise ConflictError(f"inventory item '{name}' already exists")
            item = InventoryItem(name=name, quantity=quantity, unit=data.unit, reorder_threshold=threshold)
            try:
                await self.repo.add(item)
            except IntegrityError as exc:
                raise ConflictError(f"inventory item '{name}' already exists") from exc

        logger.info("inventory item %s created (%s %g %s)", item.id, name, quantity, item.unit)
        return item

    async def list(self) -> List[InventoryItem]:
        return await self.repo.list_all()

    async def get(self, item_id: int) -> InventoryItem:
        item = await self.repo.get(item_id)
        if item is None:
            raise InventoryItemNotFound(item_id)
        return item

    async def update(self, item_id: int, data: InventoryItemUpdate) -> InventoryItem:
        fields = data.model_dump(exclude_unset=True)
        if "name" in fields and fields["name"] is not None:
            fields["name"] = validate_name(fields["name"])
        if fields.get("quantity") is not None:
            fields["quantity"] = validate_quantity(fields["quantity"])
        if fields.get("reorder_threshold") is not None:
            fields["reorder_threshold"] = validate_quantity(fields["reorder_threshold"], "reorder_threshold")

        async with transaction(self.db):
            item = await self.get(item_id)
            name = fields.get("name")
            if name and await self.repo.get_by_name(name, exclude_id=item_id):
                raise ConflictError(f"inventory item '{name}' already exists")
            for key, value in fields.items():
                if value is None and key != "reorder_threshold":
                    continue
                setattr(item, key, value)
            await self.db.flush()

        logger.info("inventory item %s updated", item_id)
        return item

    async def delete(self, item_id: int) -> None:
        async with transaction(self.db):
            item = await self.get(item_id)
            if await self.repo.is_used_in_recipes(item_id):
                raise ConflictError(f"inventory item with ID {item_id} is used by a menu item recipe")
            await self.repo.delete(item)
        logger.info("inventory item %s deleted", item_id)

    async def leftovers(self, sort_by: str, page: int, page_size: int) -> dict:
        sort_by = (sort_by or "quantity").strip().lower()
        if sort_by not in LEFTOVERS_SORT_KEYS:
            raise ValidationError("sortBy must be one of: quantity, name")
        if page < 1:
            raise ValidationError("page must be a positive number")
        if page_size < 1:
            raise ValidationError("pageSize must be a positive number")

        rows, total = await self.repo.leftovers(sort_by, page, page_size)
        total_pages = math.ceil(total / page_size) if total else 0
        return {
            "currentPage": page,
            "hasNextPage": page < total_pages,
            "pageSize": page_size,
            "totalPages": total_pages,
            "data": [{"name": r.name, "quantity": float(r.quantity), "unit": r.unit} for r in rows],
        }
