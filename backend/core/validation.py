import re
from typing import Dict, Iterable, Optional, Tuple

from core.exceptions import ValidationError

ALLOWED_INSTRUCTION_KEYS = frozenset({"temperature", "notes"})

_NAME_RE = re.compile(r"^[a-zA-Z0-9][-a-zA-Z0-9\s'&()]+[a-zA-Z0-9]$")
_HTML_RE = re.compile(r"<[^>]*>")

MAX_PRICE = 1_000_000
MAX_RECIPE_INGREDIENTS = 50
MAX_RECIPE_QUANTITY = 1000


def validate_name(name: Optional[str], field: str = "name") -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError(f"{field} cannot be empty")
    if len(name) < 2 or len(name) > 63:
        raise ValidationError(f"{field} length must be between 2 and 63 characters")
    if not _NAME_RE.match(name):
        raise ValidationError(
            f"{field} must start and end with a letter or number and can contain only "
            "letters, numbers, spaces, hyphens, apostrophes, ampersands, and parentheses"
        )
    if "  " in name:
        raise ValidationError(f"{field} cannot contain consecutive spaces")
    if "--" in name:
        raise ValidationError(f"{field} cannot contain consecutive hyphens")
    return name


def validate_special_instructions(instructions: Optional[Dict[str, str]]) -> Dict[str, str]:
    instructions = dict(instructions or {})
    for key in instructions:
        if key not in ALLOWED_INSTRUCTION_KEYS:
            raise ValidationError(f"invalid key in special_instructions: {key}")
    return instructions


def validate_description(description: Optional[str]) -> str:
    description = (description or "").strip()
    if not description:
        raise ValidationError("description cannot be empty")
    if len(description) < 10 or len(description) > 500:
        raise ValidationError("description length must be between 10 and 500 characters")
    if _HTML_RE.search(description):
        raise ValidationError("description cannot contain HTML tags")
    return description


def validate_price(price: float) -> float:
    if price <= 0:
        raise ValidationError("price must be greater than zero")
    if price > MAX_PRICE:
        raise ValidationError("price is too high")
    return float(price)


def validate_recipe(ingredients: Iterable[Tuple[int, float]]) -> None:
    """Check a recipe given as (ingredient_id, quantity) pairs."""
    seen: set[int] = set()
    count = 0
    for ingredient_id, quantity in ingredients:
        count += 1
        if ingredient_id <= 0:
            raise ValidationError(f"invalid ingredient ID: {ingredient_id}")
        if quantity <= 0:
            raise ValidationError("ingredient quantity must be greater than zero")
        if quantity > MAX_RECIPE_QUANTITY:
            raise ValidationError(f"ingredient quantity is too high (maximum {MAX_RECIPE_QUANTITY})")
        if ingredient_id in seen:
            raise ValidationError(f"duplicate ingredient ID: {ingredient_id}")
        seen.add(ingredient_id)
    if count == 0:
        raise ValidationError("ingredients list cannot be empty")
    if count > MAX_RECIPE_INGREDIENTS:
        raise ValidationError(f"too many ingredients (maximum {MAX_RECIPE_INGREDIENTS})")


def validate_quantity(quantity: float, field: str = "quantity") -> float:
    if quantity < 0:
        raise ValidationError(f"{field} cannot be negative")
    return float(quantity)
