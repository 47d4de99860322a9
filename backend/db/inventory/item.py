from sqlalchemy import Column, DateTime, Float, Integer, String, Text
from sqlalchemy.sql import func

from ..database import Base, utcnow


class InventoryItem(Base):
    """One stock-keeping ingredient (milk, espresso beans, syrup...)."""
    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False, unique=True, index=True)
    quantity = Column(Float, nullable=False, default=0.0)
    unit = Column(Text, nullable=False)

    # At or below this level the ingredient is reported as low stock.
    reorder_threshold = Column(Float, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.now(), onupdate=utcnow)

    @property
    def to_schema(self):
        return {
            "ingredient_id": self.id,
            "name": self.name,
            "quantity": float(self.quantity or 0),
            "unit": self.unit,
            "reorder_threshold": float(self.reorder_threshold) if self.reorder_threshold is not None else None,
            "updated_at": self.updated_at,
        }
