"""
Attack resolution - the damage/crit/evasion math for a single attack.

``resolve_attack`` is pure: it reads two combatant snapshots and a random
source and returns new snapshots plus the log of what happened. Callers
pass effective stats (equipment and buffs already folded in) and copy the
defender's resulting HP back onto their own state.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from engine.core.rng import RandomSource
from game.battle.log import BattleLog, LogEntry, LogType
from game.components.character import Combatant

ATK_NOISE = 0.1
DEF_NOISE = 0.05
CRIT_PER_LUCK = 2
DEFEND_DIVISOR = 2
GUARANTEED_MIN_RATIO = 0.5
GUARANTEED_BONUS_RATIO = 0.5

# (minimum defender:attacker luck ratio, evade %), checked in order
EVADE_STEPS = ((3, 50), (2, 30))
EVADE_LUCKIER = 5
EVADE_BASE = 1
EVADE_SCALE_PLAYER_ATTACKING = 0.3
EVADE_SCALE_PLAYER_DEFENDING = 1.5


@dataclass
class AttackResult:
    """
    Outcome of one attack.

    Attributes:
        attacker: Attacker snapshot after the attack (unchanged today)
        defender: Defender snapshot with HP and defend flag updated
        logs: Ordered log entries
        damage: Damage actually applied to the defender
        did_hit: Whether the attack connected
        critical: Whether the attack was a critical hit
        evaded: Whether the defender dodged
        battle_over: Defender HP reached 0
    """
    attacker: Combatant
    defender: Combatant
    logs: list[LogEntry] = field(default_factory=list)
    damage: int = 0
    did_hit: bool = False
    critical: bool = False
    evaded: bool = False
    battle_over: bool = False


def evade_rate(attacker: Combatant, defender: Combatant) -> int:
    """Chance (percent) that ``defender`` dodges ``attacker``."""
    rate = EVADE_BASE
    if defender.luk - attacker.luk > 0:
        rate = EVADE_LUCKIER
    for ratio, step_rate in reversed(EVADE_STEPS):
        if defender.luk >= attacker.luk * ratio:
            rate = step_rate

    if attacker.is_player:
        rate = math.floor(rate * EVADE_SCALE_PLAYER_ATTACKING)
    elif defender.is_player:
        rate = math.floor(rate * EVADE_SCALE_PLAYER_DEFENDING)
    return rate


def crit_rate(attacker: Combatant, defender: Combatant) -> int:
    return CRIT_PER_LUCK * (attacker.luk - defender.luk)


def resolve_attack(
    attacker: Combatant,
    defender: Combatant,
    rng: RandomSource,
    guaranteed_hit: bool = False,
) -> AttackResult:
    """
    Resolve one attack.

    Steps, each of which may end resolution early:
    1. Base damage from ATK and DEF with symmetric noise.
    2. A defending defender halves it and drops the stance.
    3. Damage <= 0 is a blocked attack; monsters stop here.
    4. Critical roll (forced when ``guaranteed_hit``) doubles damage.
    5. Evasion roll, skipped on crits and guaranteed hits.
    6. Guaranteed hits get a minimum and a luck bonus on top.
    7. Damage is applied and HP clamped at 0.

    Args:
        attacker: Effective attacker stats
        defender: Effective defender stats
        rng: Random source for noise and rolls
        guaranteed_hit: Skip evasion, force a crit and add the focus bonus

    Returns:
        AttackResult with the new defender snapshot
    """
    log = BattleLog()
    defender = defender.clone()
    did_hit = False

    log.add(f"{attacker.name} attacks {defender.name}.", LogType.TRY_TO_ATTACK)

    atk_noise = rng.randint(attacker.atk * -ATK_NOISE, attacker.atk * ATK_NOISE)
    def_noise = rng.randint(defender.defense * -DEF_NOISE, defender.defense * DEF_NOISE)
    damage = math.ceil((attacker.atk + atk_noise) - (defender.defense + def_noise))

    if defender.is_defending:
        damage = math.floor(damage / DEFEND_DIVISOR)
        defender = defender.evolve(is_defending=False)
        log.add(f"{defender.name} defends! Damage is halved.", LogType.NORMAL)

    if damage <= 0:
        damage = 0
        if not guaranteed_hit:
            log.add(f"{attacker.name}'s attack was blocked! (0 damage)", LogType.FAIL)
            if not attacker.is_player:
                return AttackResult(attacker=attacker, defender=defender, logs=log.entries)

    critical = False
    if guaranteed_hit:
        log.add("Guaranteed critical hit!", LogType.CRITICAL)
        critical = True
    elif rng.roll(crit_rate(attacker, defender)):
        log.add("Critical hit!", LogType.CRITICAL)
        critical = True
    if critical:
        damage *= 2
        did_hit = True

    if not critical and not guaranteed_hit:
        if rng.roll(evade_rate(attacker, defender)):
            log.add(f"{defender.name} dodged the attack.", LogType.FAIL)
            return AttackResult(
                attacker=attacker,
                defender=defender,
                logs=log.entries,
                evaded=True,
            )

    if guaranteed_hit:
        log.add(f"{attacker.name} focuses everything into one blow!", LogType.CRITICAL)
        damage = max(damage, math.floor(attacker.atk * GUARANTEED_MIN_RATIO))
        bonus = math.floor(damage * GUARANTEED_BONUS_RATIO + attacker.luk)
        damage += bonus
        log.add(f"Focused strike! {bonus} bonus damage!", LogType.VICTORY)
        did_hit = True

    if damage > 0:
        did_hit = True

    defender = defender.damaged(damage)
    battle_over = defender.hp <= 0
    log.add(
        f"{defender.name} takes {damage} damage. (HP: {defender.hp})",
        LogType.ATTACK,
    )

    return AttackResult(
        attacker=attacker,
        defender=defender,
        logs=log.entries,
        damage=damage,
        did_hit=did_hit,
        critical=critical,
        battle_over=battle_over,
    )
