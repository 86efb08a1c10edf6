"""
Battle actions - basic strikes and the buff mechanics wrapped around them.

These are the building blocks the turn engine sequences:
- ``check_guard``: barrier / evade negation on the target
- ``perform_strike``: a basic attack with weaken, charge, true strike,
  multi strike and lifesteal folded in
- ``retaliate``: reflect and counter from the side that was hit
- ``escape_chance``: flee odds

Every function takes and returns component values; nothing is mutated.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from engine.core.config import EngineConfig
from engine.core.rng import RandomSource
from game.battle.actor import effective_stats
from game.battle.ledger import consume_buff, find_buff, total_counter, total_lifesteal, total_reflect, total_weaken
from game.battle.log import BattleLog, LogEntry, LogType
from game.battle.resolver import resolve_attack
from game.components.character import Boss, Combatant, Player


def has_ledger(combatant: Combatant) -> bool:
    """Players and bosses carry buffs and cooldowns; monsters do not."""
    return isinstance(combatant, (Player, Boss))


def land_hit(target: Combatant, hit: Combatant) -> Combatant:
    """Copy HP and defend stance from a resolved snapshot onto the real target."""
    return target.with_hp(hit.hp).evolve(is_defending=hit.is_defending)


def weakened(atk: int, weaken: float) -> int:
    return max(1, math.floor(atk * (1 - weaken)))


@dataclass
class GuardResult:
    target: Combatant
    negated: bool = False
    logs: list[LogEntry] = field(default_factory=list)


def check_guard(target: Combatant, attacker_name: str) -> GuardResult:
    """
    Let a barrier or evade buff on ``target`` negate an incoming attack.

    A barrier is removed the moment it blocks; evade lasts its duration.
    """
    if not has_ledger(target):
        return GuardResult(target=target)

    log = BattleLog()
    barrier = find_buff(target, lambda b: b.barrier)
    if barrier is not None:
        log.add(f"{target.name}'s barrier blocks {attacker_name}'s attack!", LogType.VICTORY)
        return GuardResult(target=consume_buff(target, barrier), negated=True, logs=log.entries)

    if find_buff(target, lambda b: b.evade_all) is not None:
        log.add(f"{target.name} slips away from {attacker_name}'s attack!", LogType.VICTORY)
        return GuardResult(target=target, negated=True, logs=log.entries)

    return GuardResult(target=target)


@dataclass
class StrikeResult:
    """
    Outcome of a basic attack.

    Attributes:
        attacker: Attacker after spending one-shot buffs and lifesteal
        defender: Defender after damage
        damage: Total damage dealt (including any follow-up strike)
        did_hit: Whether the first strike connected
    """
    attacker: Combatant
    defender: Combatant
    logs: list[LogEntry] = field(default_factory=list)
    damage: int = 0
    did_hit: bool = False


def perform_strike(
    attacker: Combatant,
    defender: Combatant,
    rng: RandomSource,
    config: Optional[EngineConfig] = None,
    guaranteed_hit: bool = False,
) -> StrikeResult:
    """
    Resolve a basic attack between two real combatants.

    The defender's weaken buffs lower the attacker's ATK first. The
    attacker's charge and true strike buffs are spent on this attack;
    a multi strike buff is spent on a follow-up strike when the first
    one connects.
    """
    config = config or EngineConfig()
    log = BattleLog()
    eff_attacker = effective_stats(attacker, config)
    eff_defender = effective_stats(defender, config)

    if has_ledger(defender):
        weaken = total_weaken(defender)
        if weaken > 0:
            eff_attacker = eff_attacker.evolve(atk=weakened(eff_attacker.atk, weaken))
            log.add(f"{attacker.name} is weakened! (ATK {eff_attacker.atk})", LogType.NORMAL)

    if has_ledger(attacker):
        charge = find_buff(attacker, lambda b: b.charge_attack_multiplier > 0)
        if charge is not None:
            boosted = math.floor(eff_attacker.atk * (1 + charge.charge_attack_multiplier))
            eff_attacker = eff_attacker.evolve(atk=boosted)
            attacker = consume_buff(attacker, charge)
            log.add(f"{attacker.name} unleashes a charged attack! (ATK {boosted})", LogType.VICTORY)

        true_strike = find_buff(attacker, lambda b: b.true_strike_next)
        if true_strike is not None:
            eff_defender = eff_defender.evolve(defense=0)
            attacker = consume_buff(attacker, true_strike)
            log.add(f"{attacker.name} strikes straight through {defender.name}'s guard!", LogType.VICTORY)

    result = resolve_attack(eff_attacker, eff_defender, rng, guaranteed_hit=guaranteed_hit)
    log.extend(result.logs)
    defender = land_hit(defender, result.defender)
    damage = result.damage

    if has_ledger(attacker):
        multi = find_buff(attacker, lambda b: b.multi_strike_next > 0)
        if multi is not None:
            attacker = consume_buff(attacker, multi)
            if result.did_hit and defender.is_alive:
                log.add(f"{attacker.name} follows up with another strike!", LogType.VICTORY)
                follow_up = resolve_attack(
                    eff_attacker.evolve(atk=math.floor(eff_attacker.atk * multi.multi_strike_next)),
                    effective_stats(defender, config),
                    rng,
                )
                log.extend(follow_up.logs)
                defender = land_hit(defender, follow_up.defender)
                damage += follow_up.damage

        steal = total_lifesteal(attacker)
        heal = math.floor(damage * steal)
        if heal > 0 and attacker.is_alive:
            before = attacker.hp
            attacker = attacker.healed(heal)
            if attacker.hp > before:
                log.add(f"{attacker.name} drains {attacker.hp - before} HP.", LogType.NORMAL)

    return StrikeResult(
        attacker=attacker,
        defender=defender,
        logs=log.entries,
        damage=damage,
        did_hit=result.did_hit,
    )


@dataclass
class RetaliationResult:
    attacker: Combatant
    defender: Combatant
    logs: list[LogEntry] = field(default_factory=list)


def retaliate(
    attacker: Combatant,
    defender: Combatant,
    damage: int,
    config: Optional[EngineConfig] = None,
) -> RetaliationResult:
    """
    Apply the hit side's reflect and counter buffs back to the attacker.

    Reflect returns a share of the damage dealt even when the hit ended
    the fight. Counter needs the defender to still be standing.
    """
    config = config or EngineConfig()
    log = BattleLog()
    if damage <= 0 or not has_ledger(defender):
        return RetaliationResult(attacker=attacker, defender=defender)

    reflected = math.floor(damage * total_reflect(defender))
    if reflected > 0:
        attacker = attacker.damaged(reflected)
        log.add(
            f"{defender.name} reflects {reflected} damage to {attacker.name}! (HP: {attacker.hp})",
            LogType.ATTACK,
        )

    ratio = total_counter(defender)
    if ratio > 0 and defender.is_alive and attacker.is_alive:
        counter = max(1, math.floor(effective_stats(defender, config).atk * ratio))
        attacker = attacker.damaged(counter)
        log.add(
            f"{defender.name} counters for {counter} damage! ({attacker.name} HP: {attacker.hp})",
            LogType.ATTACK,
        )

    return RetaliationResult(attacker=attacker, defender=defender, logs=log.entries)


def escape_chance(runner: Combatant, chaser: Combatant, config: Optional[EngineConfig] = None) -> int:
    """Flee odds in percent: certain when far luckier than the chaser."""
    config = config or EngineConfig()
    runner_luk = effective_stats(runner, config).luk
    chaser_luk = effective_stats(chaser, config).luk
    if runner_luk >= chaser_luk * config.escape_luck_ratio:
        return 100
    return config.escape_chance
