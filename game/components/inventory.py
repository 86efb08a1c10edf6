"""
Inventory components - equipment and pets.

Catalog items are shared and read-only; a player holds copies of the
items it has equipped plus the ids of everything it owns.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import Field

from engine.core.component import Component
from game.components.job import Job


class EquipmentType(str, Enum):
    WEAPON = "weapon"
    ARMOR = "armor"


class LootPool(str, Enum):
    """Which victory drop table an item belongs to."""
    NONE = "none"
    NORMAL = "normal"
    BOSS = "boss"


class EquipmentItem(Component):
    """
    A weapon or armor piece.

    Attributes:
        value: ATK for weapons, DEF for armor
        price: Shop price; items sell for a fraction of it
        required_level: Minimum level to equip
        allowed_jobs: Jobs that may equip it (None = everyone)
    """
    id: str
    name: str
    type: EquipmentType
    value: int = Field(ge=0)
    price: int = Field(default=0, ge=0)
    required_level: int = 1
    allowed_jobs: Optional[list[Job]] = None
    loot_pool: LootPool = LootPool.NONE

    def usable_by(self, job: Job, level: int) -> bool:
        job_ok = self.allowed_jobs is None or job in self.allowed_jobs
        return job_ok and level >= self.required_level


class PetKind(str, Enum):
    ATTACK = "attack"
    HEAL = "heal"


class Pet(Component):
    """
    A companion that acts at the start of each player turn.

    Attack pets hit for a share of the player's effective ATK; heal pets
    restore a share of max HP.
    """
    id: str
    name: str
    kind: PetKind
    power: float = Field(gt=0)
    price: int = 0
    description: str = ""
