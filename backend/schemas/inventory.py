from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator


class InventoryItemCreate(BaseModel):
    name: str
    quantity: float
    unit: str
    reorder_threshold: Optional[float] = None

    @field_validator("name", "unit")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v


class InventoryItemUpdate(BaseModel):
    name: Optional[str] = None
    quantity: Optional[float] = None
    unit: Optional[str] = None
    reorder_threshold: Optional[float] = None

    @field_validator("name", "unit")
    @classmethod
    def _strip_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = (v or "").strip()
        if not v:
            raise ValueError("cannot be empty")
        return v


class InventoryItemOut(BaseModel):
    ingredient_id: int
    name: str
    quantity: float
    unit: str
    reorder_threshold: Optional[float] = None
    updated_at: Optional[datetime] = None


class LeftoverOut(BaseModel):
    name: str
    quantity: float
    unit: str


class LeftoversPage(BaseModel):
    currentPage: int
    hasNextPage: bool
    pageSize: int
    totalPages: int
    data: List[LeftoverOut]
