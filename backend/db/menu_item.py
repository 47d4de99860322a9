from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base, JSONType, utcnow


class MenuItem(Base):
    """Sellable product; its recipe lives in menu_item_ingredients."""
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, unique=True, index=True)
    description = Column(Text, nullable=False, default="")
    price = Column(Float, nullable=False)
    categories = Column(JSONType, nullable=False, default=list)
    available = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    ingredients = relationship(
        "MenuItemIngredient",
        back_populates="menu_item",
        cascade="all, delete-orphan",
        order_by="MenuItemIngredient.position",
    )

    @property
    def to_schema(self):
        return {
            "product_id": self.id,
            "name": self.name,
            "description": self.description,
            "price": float(self.price),
            "categories": list(self.categories or []),
            "available": bool(self.available),
            "ingredients": [
                {"ingredient_id": mi.ingredient_id, "quantity": float(mi.quantity)}
                for mi in self.ingredients
            ],
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class MenuItemIngredient(Base):
    """Recipe line: how much of one inventory item a single unit consumes."""
    __tablename__ = "menu_item_ingredients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id", ondelete="CASCADE"), nullable=False, index=True)
    ingredient_id = Column(Integer, ForeignKey("inventory.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity = Column(Float, nullable=False)
    position = Column(Integer, nullable=False, default=0)

    menu_item = relationship("MenuItem", back_populates="ingredients")
    ingredient = relationship("InventoryItem")
