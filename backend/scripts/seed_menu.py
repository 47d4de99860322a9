"""
Seed a small coffee menu with the inventory its recipes use.

Additive: existing inventory and menu items (matched by name) are left alone.

Run:
  cd backend && python scripts/seed_menu.py
"""

import asyncio
import logging
import sys
from pathlib import Path

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import select  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from core.config import settings  # noqa: E402
from core.logging import configure_logging  # noqa: E402
from db.database import build_engine, build_session_maker, create_db_and_tables, transaction  # noqa: E402
from db.inventory import InventoryItem  # noqa: E402
from db.menu_item import MenuItem, MenuItemIngredient  # noqa: E402

logger = logging.getLogger(__name__)

# name -> (quantity, unit, reorder threshold)
INVENTORY = {
    "Espresso Beans": (5000, "g", 500),
    "Milk": (20000, "ml", 2000),
    "Oat Milk": (5000, "ml", 1000),
    "Vanilla Syrup": (2000, "ml", 200),
    "Caramel Syrup": (2000, "ml", 200),
    "Chocolate Sauce": (1500, "ml", 150),
    "Whipped Cream": (1000, "g", 100),
    "Black Tea": (500, "g", 50),
    "Sugar": (3000, "g", 300),
}

# name -> (description, price, categories, [(ingredient, quantity per unit)])
MENU = {
    "Espresso": ("Single shot of freshly pulled espresso", 2.5, ["coffee", "hot"], [("Espresso Beans", 18)]),
    "Americano": ("Espresso topped up with hot water", 3.0, ["coffee", "hot"], [("Espresso Beans", 18)]),
    "Latte": (
        "Espresso with steamed milk and a thin layer of foam",
        4.0,
        ["coffee", "hot"],
        [("Milk", 200), ("Espresso Beans", 18)],
    ),
    "Oat Latte": (
        "Espresso with steamed oat milk",
        4.5,
        ["coffee", "hot", "vegan"],
        [("Oat Milk", 200), ("Espresso Beans", 18)],
    ),
    "Caramel Frappuccino": (
        "Blended iced coffee with caramel syrup and whipped cream",
        5.5,
        ["coffee", "cold"],
        [("Milk", 150), ("Espresso Beans", 18), ("Caramel Syrup", 30), ("Whipped Cream", 20)],
    ),
    "Mocha": (
        "Espresso with chocolate sauce and steamed milk",
        4.75,
        ["coffee", "hot"],
        [("Milk", 180), ("Espresso Beans", 18), ("Chocolate Sauce", 25)],
    ),
    "Vanilla Latte": (
        "Latte sweetened with vanilla syrup",
        4.5,
        ["coffee", "hot"],
        [("Milk", 200), ("Espresso Beans", 18), ("Vanilla Syrup", 20)],
    ),
    "Black Tea": ("Loose leaf black tea, brewed to order", 2.75, ["tea", "hot"], [("Black Tea", 5), ("Sugar", 5)]),
}


async def seed_menu(session: AsyncSession) -> dict:
    """Insert missing inventory rows and menu items. Returns counts of what was added."""
    added = {"inventory": 0, "menu_items": 0}
    async with transaction(session):
        res = await session.execute(select(InventoryItem))
        stock = {i.name: i for i in res.scalars().all()}
        for name, (quantity, unit, threshold) in INVENTORY.items():
            if name in stock:
                continue
            item = InventoryItem(name=name, quantity=float(quantity), unit=unit, reorder_threshold=float(threshold))
            session.add(item)
            stock[name] = item
            added["inventory"] += 1
        await session.flush()

        res = await session.execute(select(MenuItem.name))
        existing = {row[0] for row in res.all()}
        for name, (description, price, categories, recipe) in MENU.items():
            if name in existing:
                continue
            session.add(MenuItem(
                name=name,
                description=description,
                price=price,
                categories=categories,
                ingredients=[
                    MenuItemIngredient(ingredient_id=stock[ing].id, quantity=float(qty), position=pos)
                    for pos, (ing, qty) in enumerate(recipe)
                ],
            ))
            added["menu_items"] += 1

    logger.info("seeded %d inventory item(s), %d menu item(s)", added["inventory"], added["menu_items"])
    return added


async def main() -> None:
    configure_logging(settings.log_level)
    engine = build_engine(settings.database_url, echo=settings.database_echo)
    try:
        await create_db_and_tables(engine)
        async with build_session_maker(engine)() as session:
            await seed_menu(session)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
