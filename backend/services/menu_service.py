import logging
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import ConflictError, MenuItemNotFound, ValidationError
from core.validation import validate_description, validate_name, validate_price, validate_recipe
from db.database import transaction
from db.menu_item import MenuItem, MenuItemIngredient
from repositories.inventory_repository import InventoryRepository
from repositories.menu_repository import MenuRepository
from schemas.menu import MenuItemCreate, MenuItemUpdate

logger = logging.getLogger(__name__)


class MenuService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = MenuRepository(db)
        self.inventory = InventoryRepository(db)

    async def _checked_recipe(self, data: MenuItemCreate) -> List[MenuItemIngredient]:
        pairs = [(ing.ingredient_id, ing.quantity) for ing in data.ingredients]
        validate_recipe(pairs)
        known = await self.inventory.existing_ids(i for i, _ in pairs)
        for ingredient_id, _ in pairs:
            if ingredient_id not in known:
                raise ValidationError(f"ingredient with ID {ingredient_id} does not exist in inventory")
        return [
            MenuItemIngredient(ingredient_id=i, quantity=float(q), position=pos)
            for pos, (i, q) in enumerate(pairs)
        ]

    async def create(self, data: MenuItemCreate) -> MenuItem:
        name = validate_name(data.name)
        description = validate_description(data.description)
        price = validate_price(data.price)

        async with transaction(self.db):
            if await self.repo.get_by_name(name):
                raise ConflictError(f"menu item '{name}' already exists")
            recipe = await self._checked_recipe(data)
            item = MenuItem(
                name=name,
                description=description,
                price=price,
                categories=list(data.categories),
                available=data.available,
                ingredients=recipe,
            )
            try:
                await self.repo.add(item)
            except IntegrityError as exc:
                raise ConflictError(f"menu item '{name}' already exists") from exc

        logger.info("menu item %s created: %s (%d ingredients)", item.id, name, len(recipe))
        return item

    async def list(self) -> List[MenuItem]:
        return await self.repo.list_all()

    async def get(self, menu_item_id: int) -> MenuItem:
        item = await self.repo.get(menu_item_id)
        if item is None:
            raise MenuItemNotFound(menu_item_id)
        return item

    async def update(self, menu_item_id: int, data: MenuItemUpdate) -> MenuItem:
        name = validate_name(data.name)
        description = validate_description(data.description)
        price = validate_price(data.price)

        async with transaction(self.db):
            item = await self.get(menu_item_id)
            if await self.repo.get_by_name(name, exclude_id=menu_item_id):
                raise ConflictError(f"menu item '{name}' already exists")
            recipe = await self._checked_recipe(data)

            item.name = name
            item.description = description
            item.price = price
            item.categories = list(data.categories)
            item.available = data.available
            # Recipe is replaced as a whole; old rows go with delete-orphan
            item.ingredients.clear()
            await self.db.flush()
            item.ingredients.extend(recipe)
            await self.db.flush()

        logger.info("menu item %s updated", menu_item_id)
        return item

    async def delete(self, menu_item_id: int) -> None:
        async with transaction(self.db):
            item = await self.get(menu_item_id)
            if await self.repo.is_ordered(menu_item_id):
                raise ConflictError(f"menu item with ID {menu_item_id} is referenced by existing orders")
            await self.repo.delete(item)
        logger.info("menu item %s deleted", menu_item_id)
