from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class OrderItemIn(BaseModel):
    product_id: int
    quantity: int


class OrderCreate(BaseModel):
    customer_name: str
    items: List[OrderItemIn] = Field(default_factory=list)
    special_instructions: Dict[str, str] = Field(default_factory=dict)


class OrderUpdate(OrderCreate):
    pass


class OrderItemRead(BaseModel):
    product_id: int
    quantity: int
    price: float


class OrderRead(BaseModel):
    order_id: int
    customer_name: str
    status: str
    total_amount: float
    special_instructions: Dict[str, str] = {}
    items: List[OrderItemRead]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class IngredientUsageRead(BaseModel):
    ingredient_id: int
    name: str
    quantity_used: float
    remaining: float
    low_stock: bool = False


class CloseOrderResponse(BaseModel):
    order: OrderRead
    inventory_updates: List[IngredientUsageRead]


class BulkOrderRequest(BaseModel):
    orders: List[OrderCreate]


class ProcessedOrder(BaseModel):
    order_id: int
    customer_name: str
    status: str  # accepted|rejected
    total: Optional[float] = None
    reason: Optional[str] = None


class BulkSummary(BaseModel):
    total_orders: int
    accepted: int
    rejected: int
    total_revenue: float
    inventory_updates: List[IngredientUsageRead] = []


class BulkOrderResponse(BaseModel):
    processed_orders: List[ProcessedOrder]
    summary: BulkSummary
