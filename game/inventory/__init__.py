"""
Inventory module - shop purchases, equipment and enhancement.
"""

from game.inventory.equipment import (
    buy_item,
    buy_pet,
    equip_item,
    equip_pet,
    unequip,
    unequip_pet,
    enhance,
    enhance_cost,
)

__all__ = [
    "buy_item",
    "buy_pet",
    "equip_item",
    "equip_pet",
    "unequip",
    "unequip_pet",
    "enhance",
    "enhance_cost",
]
