"""
Combat components - stat bonuses, skill effects, active buffs.

A buff carries at most one effect. Each effect kind is its own model so
that a buff can never hold an evade flag and a reflect percentage at the
same time; ``ActiveBuff`` exposes the flat accessors the battle code
reads (``barrier``, ``reflect_percent`` ...), all of which are neutral
for buffs without the matching effect.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import Field

from engine.core.component import Component


class EffectType(str, Enum):
    """Effect tags a skill may declare."""
    EVADE = "evade"
    BARRIER = "barrier"
    CHARGE = "charge"
    TRADE_OFF = "trade_off"
    WEAKEN = "weaken"
    LIFESTEAL = "lifesteal"
    MULTI_STRIKE = "multiStrike"
    TRUE_STRIKE = "trueStrike"
    STUN = "stun"
    TIME_STOP = "timeStop"
    REFLECT = "reflect"
    COUNTER = "counter"


# Resolved on use; never become buffs
INSTANT_EFFECTS = frozenset({EffectType.STUN, EffectType.TIME_STOP})


class StatBonus(Component):
    """Flat stat bonus granted while a buff is active."""
    atk: int = 0
    defense: int = 0
    luk: int = 0


class SkillEffect(Component):
    """
    Effect tag declared by a catalog skill.

    Attributes:
        type: Which effect
        value: Magnitude (multiplier, percentage as 0..1, or turn count)
        penalty: DEF penalty for trade_off, 0..1
    """
    type: EffectType
    value: float = 0.0
    penalty: float = Field(default=0.0, ge=0.0, le=1.0)


class EvadeEffect(Component):
    type: Literal["evade"] = "evade"


class BarrierEffect(Component):
    type: Literal["barrier"] = "barrier"


class ChargeEffect(Component):
    type: Literal["charge"] = "charge"
    multiplier: float


class TradeOffEffect(Component):
    type: Literal["trade_off"] = "trade_off"
    atk_gain: float
    def_penalty: float = Field(ge=0.0, le=1.0)


class WeakenEffect(Component):
    type: Literal["weaken"] = "weaken"
    percent: float = Field(ge=0.0, le=1.0)


class LifestealEffect(Component):
    type: Literal["lifesteal"] = "lifesteal"
    percent: float = Field(ge=0.0)


class MultiStrikeEffect(Component):
    type: Literal["multiStrike"] = "multiStrike"
    multiplier: float = Field(gt=0.0)


class TrueStrikeEffect(Component):
    type: Literal["trueStrike"] = "trueStrike"


class ReflectEffect(Component):
    type: Literal["reflect"] = "reflect"
    percent: float = Field(ge=0.0)


class CounterEffect(Component):
    type: Literal["counter"] = "counter"
    ratio: float = Field(gt=0.0)


BuffEffect = Annotated[
    Union[
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
    ],
    Field(discriminator="type"),
]


class ActiveBuff(Component):
    """
    A timed modifier on a combatant.

    Created by skill use. ``remaining_turns`` is decremented at the start
    of the owner's own turn and the buff is evicted when it reaches zero.
    One-shot effects (barrier, charge, multi strike, true strike) are
    removed the moment they are spent.

    Attributes:
        source_skill: Key of the skill that created the buff
        remaining_turns: Turns left, counted on the owner's turns
        bonuses: Flat ATK/DEF/LUK added to effective stats
        effect: The single situational effect, if any
    """
    source_skill: str
    remaining_turns: int = Field(ge=0)
    bonuses: StatBonus = Field(default_factory=StatBonus)
    effect: Optional[BuffEffect] = None

    @property
    def evade_all(self) -> bool:
        return isinstance(self.effect, EvadeEffect)

    @property
    def barrier(self) -> bool:
        return isinstance(self.effect, BarrierEffect)

    @property
    def true_strike_next(self) -> bool:
        return isinstance(self.effect, TrueStrikeEffect)

    @property
    def charge_attack_multiplier(self) -> float:
        return self.effect.multiplier if isinstance(self.effect, ChargeEffect) else 0.0

    @property
    def multi_strike_next(self) -> float:
        return self.effect.multiplier if isinstance(self.effect, MultiStrikeEffect) else 0.0

    @property
    def reflect_percent(self) -> float:
        return self.effect.percent if isinstance(self.effect, ReflectEffect) else 0.0

    @property
    def life_steal_percent(self) -> float:
        return self.effect.percent if isinstance(self.effect, LifestealEffect) else 0.0

    @property
    def weaken_percent(self) -> float:
        return self.effect.percent if isinstance(self.effect, WeakenEffect) else 0.0

    @property
    def counter_ratio(self) -> float:
        return self.effect.ratio if isinstance(self.effect, CounterEffect) else 0.0

    @property
    def attack_multiplier(self) -> float:
        """Sustained ATK factor (trade_off gain); 1.0 when neutral."""
        if isinstance(self.effect, TradeOffEffect):
            return 1.0 + self.effect.atk_gain
        return 1.0

    @property
    def defense_multiplier(self) -> float:
        """Sustained DEF factor; below 1.0 is a reduction."""
        if isinstance(self.effect, TradeOffEffect):
            return 1.0 - self.effect.def_penalty
        return 1.0

    @property
    def is_one_shot(self) -> bool:
        return isinstance(
            self.effect,
            (BarrierEffect, ChargeEffect, MultiStrikeEffect, TrueStrikeEffect),
        )
