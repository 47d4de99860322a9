import pytest
from sqlalchemy import func, select

from db.inventory import InventoryItem
from db.menu_item import MenuItem
from scripts.seed_menu import INVENTORY, MENU, seed_menu
from services.menu_service import MenuService


@pytest.mark.asyncio
async def test_seed_menu_is_additive(session, session_maker):
    first = await seed_menu(session)
    assert first == {"inventory": len(INVENTORY), "menu_items": len(MENU)}

    second = await seed_menu(session)
    assert second == {"inventory": 0, "menu_items": 0}

    async with session_maker() as s:
        assert (await s.execute(select(func.count(InventoryItem.id)))).scalar_one() == len(INVENTORY)
        assert (await s.execute(select(func.count(MenuItem.id)))).scalar_one() == len(MENU)
        latte = (await s.execute(select(MenuItem).where(MenuItem.name == "Latte"))).scalar_one()
        latte = await MenuService(s).get(latte.id)
        assert [float(i.quantity) for i in latte.ingredients] == [200.0, 18.0]
