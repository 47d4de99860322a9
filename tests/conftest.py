import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from core.config import Settings
from db.database import build_session_maker, create_db_and_tables
from db.inventory import InventoryItem
from db.menu_item import MenuItem, MenuItemIngredient
from main import create_app
from schemas.orders import OrderCreate, OrderItemIn
from services.order_service import OrderService


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'coffee.db'}"


@pytest_asyncio.fixture
async def engine(db_url):
    engine = create_async_engine(db_url, poolclass=NullPool)
    await create_db_and_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return build_session_maker(engine)


@pytest_asyncio.fixture
async def session(session_maker):
    async with session_maker() as s:
        yield s


@pytest.fixture
def make_shop(session):
    """Milk + coffee inventory and a Latte (200 milk, 18 coffee) and Espresso (18 coffee) menu."""

    async def _make(milk=500.0, coffee=40.0, milk_threshold=None, coffee_threshold=None, latte_milk=200.0):
        milk_row = InventoryItem(name="Milk", quantity=milk, unit="ml", reorder_threshold=milk_threshold)
        coffee_row = InventoryItem(name="Coffee", quantity=coffee, unit="g", reorder_threshold=coffee_threshold)
        session.add_all([milk_row, coffee_row])
        await session.flush()

        latte = MenuItem(
            name="Latte",
            description="Espresso with steamed milk",
            price=4.0,
            categories=["coffee"],
            ingredients=[
                MenuItemIngredient(ingredient_id=milk_row.id, quantity=latte_milk, position=0),
                MenuItemIngredient(ingredient_id=coffee_row.id, quantity=18.0, position=1),
            ],
        )
        espresso = MenuItem(
            name="Espresso",
            description="Single shot of espresso",
            price=2.5,
            categories=["coffee"],
            ingredients=[MenuItemIngredient(ingredient_id=coffee_row.id, quantity=18.0, position=0)],
        )
        session.add_all([latte, espresso])
        await session.commit()
        return {"milk": milk_row.id, "coffee": coffee_row.id, "latte": latte.id, "espresso": espresso.id}

    return _make


@pytest.fixture
def place_order(session):
    async def _place(lines, customer_name="Alice"):
        data = OrderCreate(
            customer_name=customer_name,
            items=[OrderItemIn(product_id=p, quantity=q) for p, q in lines],
        )
        order = await OrderService(session).create(data)
        return order.id

    return _place


@pytest.fixture
def stock_of(session_maker):
    """Read an inventory quantity through a fresh session."""

    async def _stock(item_id):
        async with session_maker() as s:
            item = await s.get(InventoryItem, item_id)
            return item.quantity

    return _stock


@pytest_asyncio.fixture
async def client(db_url):
    settings = Settings()
    settings.database_url = db_url
    settings.log_level = "DEBUG"
    app = create_app(settings)
    # ASGITransport does not run the lifespan
    await create_db_and_tables(app.state.engine)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    await app.state.engine.dispose()


@pytest_asyncio.fixture
async def api_shop(client):
    milk = (await client.post("/inventory", json={"name": "Milk", "quantity": 500, "unit": "ml",
                                                  "reorder_threshold": 100})).json()
    coffee = (await client.post("/inventory", json={"name": "Coffee", "quantity": 40, "unit": "g"})).json()
    latte = (await client.post("/menu", json={
        "name": "Latte",
        "description": "Espresso with steamed milk",
        "price": 4.0,
        "categories": ["coffee", "hot"],
        "ingredients": [
            {"ingredient_id": milk["ingredient_id"], "quantity": 200},
            {"ingredient_id": coffee["ingredient_id"], "quantity": 18},
        ],
    })).json()
    return {"milk": milk["ingredient_id"], "coffee": coffee["ingredient_id"], "latte": latte["product_id"]}
