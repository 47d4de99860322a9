from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base, JSONType, utcnow

STATUS_OPEN = "open"
STATUS_UPDATED = "updated"
STATUS_CLOSED = "closed"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_name = Column(String, nullable=False, index=True)
    status = Column(Text, nullable=False, default=STATUS_OPEN, index=True)  # open|updated|closed
    total_amount = Column(Float, nullable=False, default=0.0)
    special_instructions = Column(JSONType, nullable=False, default=dict)

    created_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.now(), index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, server_default=func.now())

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    @property
    def is_closed(self) -> bool:
        return self.status == STATUS_CLOSED

    @property
    def to_schema(self):
        return {
            "order_id": self.id,
            "customer_name": self.customer_name,
            "status": self.status,
            "total_amount": float(self.total_amount or 0),
            "special_instructions": dict(self.special_instructions or {}),
            "items": [
                {"product_id": oi.menu_item_id, "quantity": oi.quantity, "price": float(oi.price)}
                for oi in self.items
            ],
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class OrderItem(Base):
    __tablename__ = "order_items"
    __table_args__ = (UniqueConstraint("order_id", "menu_item_id", name="ux_order_items_order_menu_item"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)

    # Unit price snapshotted when the line was written; never recomputed at close.
    price = Column(Float, nullable=False)

    order = relationship("Order", back_populates="items")
    menu_item = relationship("MenuItem")
