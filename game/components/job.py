"""
Jobs (character classes) and their stat profiles.
"""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from engine.core.component import Component


class Job(str, Enum):
    MAGE = "mage"
    WARRIOR = "warrior"
    ROGUE = "rogue"


class StatModifiers(Component):
    """Per-job multipliers applied to level growth."""
    hp: float = Field(default=1.0, gt=0)
    atk: float = Field(default=1.0, gt=0)
    defense: float = Field(default=1.0, gt=0)
    luk: float = Field(default=1.0, gt=0)


class JobProfile(Component):
    """
    How a job's stats grow with level.

    Attributes:
        modifiers: Multipliers on the per-level growth
        bonus_atk: Percentage bonus on ATK (10 = +10%)
        bonus_def: Percentage bonus on DEF
        bonus_luk: Percentage bonus on LUK
    """
    job: Job
    name: str
    modifiers: StatModifiers = Field(default_factory=StatModifiers)
    bonus_atk: float = 0.0
    bonus_def: float = 0.0
    bonus_luk: float = 0.0
