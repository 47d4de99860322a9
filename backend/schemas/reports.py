from typing import Dict, List, Optional

from pydantic import BaseModel


class TotalSales(BaseModel):
    total_sales: float


class PopularItem(BaseModel):
    product_id: int
    name: str
    price: float
    ordered_quantity: int


class OrderedItemsByPeriod(BaseModel):
    period: str  # day|month
    month: Optional[str] = None
    year: int
    orderedItems: List[Dict[str, int]]


class MenuSearchHit(BaseModel):
    id: int
    name: str
    description: str
    price: float


class OrderSearchHit(BaseModel):
    id: int
    customer_name: str
    items: List[str]
    total: float


class SearchResult(BaseModel):
    menu_items: List[MenuSearchHit] = []
    orders: List[OrderSearchHit] = []
    total_matches: int = 0
