"""
Game components - data-only value types.

All components are Pydantic models. Rules live in the battle and
progression packages and always return new component values.
"""

from game.components.job import Job, JobProfile, StatModifiers
from game.components.combat import (
    ActiveBuff,
    BuffEffect,
    EffectType,
    SkillEffect,
    StatBonus,
    EvadeEffect,
    BarrierEffect,
    ChargeEffect,
    TradeOffEffect,
    WeakenEffect,
    LifestealEffect,
    MultiStrikeEffect,
    TrueStrikeEffect,
    ReflectEffect,
    CounterEffect,
    INSTANT_EFFECTS,
)
from game.components.inventory import EquipmentItem, EquipmentType, LootPool, Pet, PetKind
from game.components.skill import SkillDefinition, SkillKind
from game.components.character import Boss, Combatant, CombatantKind, Player

__all__ = [
    # Jobs
    "Job",
    "JobProfile",
    "StatModifiers",
    # Combat
    "ActiveBuff",
    "BuffEffect",
    "EffectType",
    "SkillEffect",
    "StatBonus",
    "EvadeEffect",
    "BarrierEffect",
    "ChargeEffect",
    "TradeOffEffect",
    "WeakenEffect",
    "LifestealEffect",
    "MultiStrikeEffect",
    "TrueStrikeEffect",
    "ReflectEffect",
    "CounterEffect",
    "INSTANT_EFFECTS",
    # Inventory
    "EquipmentItem",
    "EquipmentType",
    "LootPool",
    "Pet",
    "PetKind",
    # Skills
    "SkillDefinition",
    "SkillKind",
    # Characters
    "Boss",
    "Combatant",
    "CombatantKind",
    "Player",
]
