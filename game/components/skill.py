"""
Skill definitions - immutable catalog entries.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import Field

from engine.core.component import Component
from game.components.combat import EffectType, SkillEffect, StatBonus
from game.components.job import Job


class SkillKind(str, Enum):
    ATTACK = "attack"
    HEAL = "heal"
    BUFF = "buff"


class SkillDefinition(Component):
    """
    Static data for a skill.

    Attributes:
        key: Unique skill identifier
        kind: attack, heal or buff
        cooldown: Turns before the skill can be used again
        required_level: Minimum level to learn
        allowed_jobs: Jobs that may learn it (None = everyone)
        damage_multiplier: ATK multiplier for attack/heal skills
        growth_per_level: Added to the multiplier per upgrade level
        duration: Buff length in the owner's turns
        max_level: Upgrade cap (None = engine default)
        guaranteed_crit: Attack resolves as a guaranteed hit
        bonuses: Flat stat bonuses granted by the buff
        effect: Situational effect tag
    """
    key: str
    name: str
    description: str = ""
    kind: SkillKind
    cooldown: int = Field(default=0, ge=0)
    required_level: int = Field(default=1, ge=1)
    allowed_jobs: Optional[list[Job]] = None
    damage_multiplier: Optional[float] = None
    growth_per_level: float = 0.0
    duration: Optional[int] = None
    max_level: Optional[int] = None
    guaranteed_crit: bool = False
    bonuses: StatBonus = Field(default_factory=StatBonus)
    effect: Optional[SkillEffect] = None

    def allows(self, job: Job) -> bool:
        return self.allowed_jobs is None or job in self.allowed_jobs

    def multiplier_at(self, upgrade_level: int) -> float:
        """Effective attack/heal multiplier at an upgrade level."""
        base = 1.0 if self.damage_multiplier is None else self.damage_multiplier
        return base + self.growth_per_level * upgrade_level

    @property
    def effect_type(self) -> Optional[EffectType]:
        return self.effect.type if self.effect else None
