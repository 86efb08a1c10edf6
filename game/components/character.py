"""
Character components - the shared combatant shape and its player/boss variants.

Monsters are plain ``Combatant`` values. Players and bosses additionally
carry a ledger (active buffs plus skill cooldowns) and a skill list.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, TypeVar

from pydantic import Field, model_validator

from engine.core.component import Component
from game.components.combat import ActiveBuff
from game.components.inventory import EquipmentItem, Pet
from game.components.job import Job

C = TypeVar("C", bound="Combatant")


class CombatantKind(str, Enum):
    """Which side of the rules a combatant plays by."""
    PLAYER = "player"
    MONSTER = "monster"
    BOSS = "boss"


class Combatant(Component):
    """
    Anything with HP/ATK/DEF/LUK that can fight.

    Invariant: 0 <= hp <= max_hp. Use ``with_hp`` for every HP change;
    it clamps into range.

    Attributes:
        name: Display name
        kind: Player, monster or boss
        level: Level (drives rewards for monsters and bosses)
        hp: Current hit points
        max_hp: Maximum hit points
        atk: Attack
        defense: Defense
        luk: Luck (crit, evasion and escape rolls)
        is_defending: Halves the next incoming hit, then clears
    """
    name: str
    kind: CombatantKind = CombatantKind.MONSTER
    level: int = Field(default=1, ge=1)
    hp: int = Field(ge=0)
    max_hp: int = Field(ge=1)
    atk: int
    defense: int
    luk: int = 0
    is_defending: bool = False

    @model_validator(mode="after")
    def check_hp_range(self) -> Combatant:
        if self.hp > self.max_hp:
            raise ValueError(f"hp {self.hp} exceeds max_hp {self.max_hp}")
        return self

    @property
    def is_alive(self) -> bool:
        return self.hp > 0

    @property
    def is_player(self) -> bool:
        return self.kind == CombatantKind.PLAYER

    @property
    def is_boss(self) -> bool:
        return self.kind == CombatantKind.BOSS

    def with_hp(self: C, hp: int) -> C:
        """Copy with HP clamped to [0, max_hp]."""
        return self.evolve(hp=max(0, min(self.max_hp, hp)))

    def healed(self: C, amount: int) -> C:
        return self.with_hp(self.hp + amount)

    def damaged(self: C, amount: int) -> C:
        return self.with_hp(self.hp - amount)

    def restored(self: C) -> C:
        """Copy at full HP."""
        return self.with_hp(self.max_hp)


class Boss(Combatant):
    """
    A boss: a combatant with skills and its own buff/cooldown ledger.
    """
    kind: CombatantKind = CombatantKind.BOSS
    skills: list[str] = Field(default_factory=list)
    skill_cooldowns: dict[str, int] = Field(default_factory=dict)
    active_buffs: list[ActiveBuff] = Field(default_factory=list)


class Player(Combatant):
    """
    The player character.

    Equipment definitions are catalog data; the player holds its own
    copies of equipped items and the ids of everything it owns.
    ``enhance_levels`` is keyed by weapon, armor or pet id.
    """
    kind: CombatantKind = CombatantKind.PLAYER
    job: Job
    exp: int = 0
    goal_exp: int = 150
    gold: int = 0
    wins: int = 0
    losses: int = 0
    skill_points: int = 0

    weapon: Optional[EquipmentItem] = None
    armor: Optional[EquipmentItem] = None
    pet: Optional[Pet] = None
    owned_weapon_ids: list[str] = Field(default_factory=list)
    owned_armor_ids: list[str] = Field(default_factory=list)
    owned_pet_ids: list[str] = Field(default_factory=list)
    enhance_levels: dict[str, int] = Field(default_factory=dict)

    skills: list[str] = Field(default_factory=list)
    skill_levels: dict[str, int] = Field(default_factory=dict)
    skill_cooldowns: dict[str, int] = Field(default_factory=dict)
    active_buffs: list[ActiveBuff] = Field(default_factory=list)

    def enhance_level(self, item_id: Optional[str]) -> int:
        if item_id is None:
            return 0
        return self.enhance_levels.get(item_id, 0)

    def skill_level(self, key: str) -> int:
        return self.skill_levels.get(key, 0)

    def owns(self, item_id: str) -> bool:
        return (
            item_id in self.owned_weapon_ids
            or item_id in self.owned_armor_ids
            or item_id in self.owned_pet_ids
        )
