"""
Buff/cooldown ledger.

Players and bosses both carry ``active_buffs`` and ``skill_cooldowns``;
every function here works on either. Monsters carry neither and never
reach this module.
"""

from __future__ import annotations

from typing import Callable, Optional, Protocol, TypeVar

from game.components.character import Boss, Player
from game.components.combat import ActiveBuff

L = TypeVar("L", Player, Boss)


class SupportsLedger(Protocol):
    active_buffs: list[ActiveBuff]
    skill_cooldowns: dict[str, int]


def tick(bearer: L) -> L:
    """
    Advance the ledger by one of the owner's turns.

    Every buff loses a turn and is evicted at zero; every positive
    cooldown drops by one, floored at zero.
    """
    buffs = [
        buff.evolve(remaining_turns=buff.remaining_turns - 1)
        for buff in bearer.active_buffs
    ]
    cooldowns = {
        key: max(0, turns - 1)
        for key, turns in bearer.skill_cooldowns.items()
    }
    return bearer.evolve(
        active_buffs=[buff for buff in buffs if buff.remaining_turns > 0],
        skill_cooldowns=cooldowns,
    )


def find_buff(bearer: SupportsLedger, predicate: Callable[[ActiveBuff], object]) -> Optional[ActiveBuff]:
    """First active buff matching ``predicate``, in application order."""
    for buff in bearer.active_buffs:
        if predicate(buff):
            return buff
    return None


def consume_buff(bearer: L, buff: ActiveBuff) -> L:
    """Remove one specific buff (a spent one-shot effect)."""
    remaining = list(bearer.active_buffs)
    for i, existing in enumerate(remaining):
        if existing == buff:
            del remaining[i]
            break
    return bearer.evolve(active_buffs=remaining)


def add_buff(bearer: L, buff: ActiveBuff) -> L:
    return bearer.evolve(active_buffs=[*bearer.active_buffs, buff])


def total_weaken(bearer: SupportsLedger) -> float:
    """Combined ATK reduction the bearer's buffs impose on its opponent."""
    return min(1.0, sum(buff.weaken_percent for buff in bearer.active_buffs))


def total_reflect(bearer: SupportsLedger) -> float:
    return sum(buff.reflect_percent for buff in bearer.active_buffs)


def total_lifesteal(bearer: SupportsLedger) -> float:
    return sum(buff.life_steal_percent for buff in bearer.active_buffs)


def total_counter(bearer: SupportsLedger) -> float:
    return sum(buff.counter_ratio for buff in bearer.active_buffs)


def set_cooldown(bearer: L, skill_key: str, turns: int) -> L:
    return bearer.evolve(skill_cooldowns={**bearer.skill_cooldowns, skill_key: turns})


def clear_buffs(bearer: L) -> L:
    return bearer.evolve(active_buffs=[])
