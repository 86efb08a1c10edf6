"""
Skill system - learning, upgrading and using skills.

Learning spends a skill point and raises the skill's upgrade level.
Using a skill is interpreted from its kind and effect tag:
- buff: an ActiveBuff on the caster
- attack: an attack at ATK x (multiplier + growth x upgrade level)
- heal: restore effective ATK x multiplier HP
- stun / timeStop: instant effects reported to the turn engine
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from engine.core.config import EngineConfig
from engine.core.rng import RandomSource
from game.battle.actions import has_ledger, land_hit, weakened
from game.battle.actor import effective_stats
from game.battle.ledger import add_buff, set_cooldown, total_weaken
from game.battle.log import BattleLog, LogEntry, LogType
from game.battle.resolver import resolve_attack
from game.catalog import Catalog
from game.components.character import Boss, Combatant, Player
from game.components.combat import (
    ActiveBuff,
    BarrierEffect,
    ChargeEffect,
    CounterEffect,
    EffectType,
    EvadeEffect,
    LifestealEffect,
    MultiStrikeEffect,
    ReflectEffect,
    SkillEffect,
    TradeOffEffect,
    TrueStrikeEffect,
    WeakenEffect,
)
from game.components.skill import SkillDefinition, SkillKind
from game.errors import ActionError

Caster = Union[Player, Boss]

# effect tag -> buff effect factory
_BUFF_EFFECTS: dict[EffectType, Callable[[SkillEffect], object]] = {
    EffectType.EVADE: lambda e: EvadeEffect(),
    EffectType.BARRIER: lambda e: BarrierEffect(),
    EffectType.CHARGE: lambda e: ChargeEffect(multiplier=e.value),
    EffectType.TRADE_OFF: lambda e: TradeOffEffect(atk_gain=e.value, def_penalty=e.penalty),
    EffectType.WEAKEN: lambda e: WeakenEffect(percent=e.value),
    EffectType.LIFESTEAL: lambda e: LifestealEffect(percent=e.value),
    EffectType.MULTI_STRIKE: lambda e: MultiStrikeEffect(multiplier=e.value),
    EffectType.TRUE_STRIKE: lambda e: TrueStrikeEffect(),
    EffectType.REFLECT: lambda e: ReflectEffect(percent=e.value),
    EffectType.COUNTER: lambda e: CounterEffect(ratio=e.value),
}


def max_level_of(skill: SkillDefinition, config: EngineConfig) -> int:
    return skill.max_level or config.skill_max_level


def check_learnable(
    player: Player,
    skill: Optional[SkillDefinition],
    config: Optional[EngineConfig] = None,
) -> Optional[ActionError]:
    """
    Why ``player`` can't learn (or upgrade) ``skill``, or None if it can.
    """
    config = config or EngineConfig()
    if skill is None:
        return ActionError.UNKNOWN_SKILL
    if player.level < skill.required_level:
        return ActionError.LEVEL_TOO_LOW
    if not skill.allows(player.job):
        return ActionError.JOB_NOT_ALLOWED
    if player.skill_points <= 0:
        return ActionError.NO_SKILL_POINTS
    if player.skill_level(skill.key) >= max_level_of(skill, config):
        return ActionError.SKILL_MAX_LEVEL
    return None


_LEARN_MESSAGES = {
    ActionError.UNKNOWN_SKILL: "No such skill.",
    ActionError.LEVEL_TOO_LOW: "Your level is too low to learn this skill.",
    ActionError.JOB_NOT_ALLOWED: "Your job can't learn this skill.",
    ActionError.NO_SKILL_POINTS: "Not enough skill points.",
    ActionError.SKILL_MAX_LEVEL: "This skill is already at its maximum level.",
}


@dataclass
class LearnResult:
    player: Player
    logs: list[LogEntry] = field(default_factory=list)
    error: Optional[ActionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def learn_skill(
    player: Player,
    key: str,
    catalog: Catalog,
    config: Optional[EngineConfig] = None,
) -> LearnResult:
    """Learn a new skill or upgrade a known one for one skill point."""
    config = config or EngineConfig()
    log = BattleLog()
    skill = catalog.skill(key)
    error = check_learnable(player, skill, config)
    if error is not None:
        log.add(_LEARN_MESSAGES[error], LogType.FAIL)
        return LearnResult(player=player, logs=log.entries, error=error)

    level = player.skill_level(key) + 1
    skills = list(player.skills)
    if key not in skills:
        skills.append(key)
        log.add(f"Learned {skill.name}!", LogType.LEVEL_UP)
    else:
        log.add(f"{skill.name} is now level {level}!", LogType.LEVEL_UP)

    player = player.evolve(
        skills=skills,
        skill_levels={**player.skill_levels, key: level},
        skill_points=player.skill_points - 1,
    )
    return LearnResult(player=player, logs=log.entries)


def check_usable(caster: Caster, key: str, catalog: Catalog) -> Optional[ActionError]:
    """Why ``caster`` can't use ``key`` right now, or None if it can."""
    if not catalog.has_skill(key):
        return ActionError.UNKNOWN_SKILL
    if key not in caster.skills:
        return ActionError.SKILL_NOT_LEARNED
    if caster.skill_cooldowns.get(key, 0) > 0:
        return ActionError.SKILL_ON_COOLDOWN
    return None


def build_buff(skill: SkillDefinition) -> Optional[ActiveBuff]:
    """
    The buff a skill grants, or None for instant effects.

    A buff skill without an effect tag still grants its stat bonuses.
    """
    effect = None
    if skill.effect is not None:
        if skill.effect.type not in _BUFF_EFFECTS:
            return None
        effect = _BUFF_EFFECTS[skill.effect.type](skill.effect)
    return ActiveBuff(
        source_skill=skill.key,
        remaining_turns=skill.duration or 1,
        bonuses=skill.bonuses.clone(),
        effect=effect,
    )


@dataclass
class SkillOutcome:
    """
    Result of using a skill.

    Attributes:
        caster: Caster with cooldown set and any buff or heal applied
        opponent: Opponent after any damage
        damage: Damage dealt to the opponent
        did_hit: Attack skills only
        battle_over: Opponent HP reached 0
        stun_turns: Turns the opponent loses
        extra_turn: The caster acts again immediately
    """
    caster: Caster
    opponent: Combatant
    logs: list[LogEntry] = field(default_factory=list)
    damage: int = 0
    did_hit: bool = False
    battle_over: bool = False
    stun_turns: int = 0
    extra_turn: bool = False


def use_skill(
    skill: SkillDefinition,
    caster: Caster,
    opponent: Combatant,
    rng: RandomSource,
    config: Optional[EngineConfig] = None,
) -> SkillOutcome:
    """
    Interpret one skill use.

    The cooldown is set on every use, whatever the outcome. Callers have
    already validated the use with ``check_usable``.
    """
    config = config or EngineConfig()
    log = BattleLog()
    caster = set_cooldown(caster, skill.key, skill.cooldown)
    log.add(f"{caster.name} uses {skill.name}!", LogType.VICTORY)

    effect_type = skill.effect_type
    if effect_type == EffectType.STUN:
        turns = max(1, int(skill.effect.value))
        log.add(f"{opponent.name} is stunned for {turns} turn(s)!", LogType.CRITICAL)
        return SkillOutcome(caster=caster, opponent=opponent, logs=log.entries, stun_turns=turns)

    if effect_type == EffectType.TIME_STOP:
        log.add(f"Time stops! {caster.name} moves again.", LogType.CRITICAL)
        return SkillOutcome(caster=caster, opponent=opponent, logs=log.entries, extra_turn=True)

    if skill.kind == SkillKind.BUFF:
        buff = build_buff(skill)
        if buff is not None:
            caster = add_buff(caster, buff)
            log.add(f"{skill.name} is active for {buff.remaining_turns} turn(s).", LogType.NORMAL)
        return SkillOutcome(caster=caster, opponent=opponent, logs=log.entries)

    level = caster.skill_level(skill.key) if isinstance(caster, Player) else 0
    multiplier = skill.multiplier_at(level)
    caster_stats = effective_stats(caster, config)

    if skill.kind == SkillKind.HEAL:
        amount = math.floor(caster_stats.atk * multiplier)
        before = caster.hp
        caster = caster.healed(amount)
        log.add(f"{caster.name} recovers {caster.hp - before} HP. (HP: {caster.hp})", LogType.NORMAL)
        return SkillOutcome(caster=caster, opponent=opponent, logs=log.entries)

    attacker = caster_stats.evolve(atk=math.floor(caster_stats.atk * multiplier))
    if has_ledger(opponent):
        weaken = total_weaken(opponent)
        if weaken > 0:
            attacker = attacker.evolve(atk=weakened(attacker.atk, weaken))
    result = resolve_attack(
        attacker,
        effective_stats(opponent, config),
        rng,
        guaranteed_hit=skill.guaranteed_crit,
    )
    log.extend(result.logs)
    opponent = land_hit(opponent, result.defender)
    return SkillOutcome(
        caster=caster,
        opponent=opponent,
        logs=log.entries,
        damage=result.damage,
        did_hit=result.did_hit,
        battle_over=result.battle_over,
    )
