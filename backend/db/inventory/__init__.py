"""
Inventory ledger.

Models:
- InventoryItem (one row per ingredient: stock level + reorder threshold)
"""

from .item import InventoryItem  # noqa: F401
