from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class RecipeIngredient(BaseModel):
    ingredient_id: int
    quantity: float


class MenuItemCreate(BaseModel):
    name: str
    description: str
    price: float
    categories: List[str] = []
    available: bool = True
    ingredients: List[RecipeIngredient] = Field(default_factory=list)

    @field_validator("categories")
    @classmethod
    def _clean_categories(cls, v: List[str]) -> List[str]:
        out = [(c or "").strip() for c in (v or [])]
        return [c for c in out if c]


class MenuItemUpdate(MenuItemCreate):
    pass


class MenuItemOut(BaseModel):
    product_id: int
    name: str
    description: str
    price: float
    categories: List[str] = []
    available: bool
    ingredients: List[RecipeIngredient]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
