import pytest

from core.exceptions import InsufficientInventory, OrderNotFound, Shortage, ValidationError
from core.validation import (
    validate_description,
    validate_name,
    validate_price,
    validate_quantity,
    validate_recipe,
    validate_special_instructions,
)


@pytest.mark.parametrize("name", ["Alice", "Mary-Jane", "O'Brien", "Tom & Jerry", "Cafe (Downtown) 2"])
def test_valid_names(name):
    assert validate_name(f"  {name} ") == name


@pytest.mark.parametrize("name", ["", "   ", "A", "-Alice", "Alice!", "Al  ice", "Al--ice", "x" * 64])
def test_invalid_names(name):
    with pytest.raises(ValidationError):
        validate_name(name)


def test_name_error_uses_field_label():
    with pytest.raises(ValidationError, match="customer_name"):
        validate_name("", "customer_name")


def test_special_instructions_allow_list():
    assert validate_special_instructions({"temperature": "hot", "notes": "no foam"}) == {
        "temperature": "hot", "notes": "no foam",
    }
    assert validate_special_instructions(None) == {}
    with pytest.raises(ValidationError, match="size"):
        validate_special_instructions({"size": "large"})


def test_description_rules():
    assert validate_description(" Rich dark roast ") == "Rich dark roast"
    for bad in ["", "too short", "<p>Rich dark roast</p>", "x" * 501]:
        with pytest.raises(ValidationError):
            validate_description(bad)


def test_price_rules():
    assert validate_price(3) == 3.0
    for bad in [0, -1, 1_000_001]:
        with pytest.raises(ValidationError):
            validate_price(bad)


def test_recipe_rules():
    validate_recipe([(1, 200), (2, 18)])
    for bad in [[], [(0, 1)], [(1, 0)], [(1, 1001)], [(1, 1), (1, 2)], [(i, 1) for i in range(1, 52)]]:
        with pytest.raises(ValidationError):
            validate_recipe(bad)


def test_quantity_rules():
    assert validate_quantity(0) == 0
    with pytest.raises(ValidationError, match="reorder_threshold"):
        validate_quantity(-0.5, "reorder_threshold")


def test_insufficient_inventory_reports_first_shortage():
    exc = InsufficientInventory([Shortage(3, "Milk", 400, 300), Shortage(7, "Coffee", 36, 10)])
    assert (exc.ingredient_id, exc.name, exc.required, exc.available) == (3, "Milk", 400, 300)
    assert len(exc.shortages) == 2
    assert str(exc) == "insufficient inventory for ingredient ID 3 (available: 300, required: 400)"


def test_insufficient_inventory_needs_a_shortage():
    with pytest.raises(ValueError):
        InsufficientInventory([])


def test_not_found_message():
    assert str(OrderNotFound(42)) == "order with ID 42 not found"
