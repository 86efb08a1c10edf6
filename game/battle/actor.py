"""
Battle actors - creating combatants and computing their effective stats.
"""

from __future__ import annotations

import math
from typing import Optional

from engine.core.config import EngineConfig
from engine.core.rng import RandomSource
from game.catalog import BossDungeon, Catalog, Dungeon
from game.components.character import Boss, Combatant, CombatantKind, Player
from game.components.job import Job, JobProfile

NAMED_PREFIX = "[Named] "
SCARECROW_NAME = "Scarecrow"

# Boss stat growth per boss level
BOSS_HP_PER_LEVEL = 200
BOSS_ATK_PER_LEVEL = 80
BOSS_DEF_PER_LEVEL = 60
BOSS_LUK_PER_LEVEL = 15


def base_stats(level: int, profile: JobProfile, config: EngineConfig) -> dict[str, int]:
    """
    Stats a job has at a level, before equipment and buffs.

    Returns:
        Dict with max_hp, atk, defense, luk
    """
    mods = profile.modifiers
    hp_base, hp_bonus = config.hp_growth
    return {
        "max_hp": math.floor((level * hp_base + level * hp_bonus) * mods.hp),
        "atk": math.floor(level * config.atk_growth * mods.atk * (1 + profile.bonus_atk / 100)),
        "defense": math.floor(level * config.def_growth * mods.defense * (1 + profile.bonus_def / 100)),
        "luk": math.floor(level * config.luk_growth * mods.luk * (1 + profile.bonus_luk / 100)),
    }


def goal_exp_for(level: int, config: EngineConfig) -> int:
    per_level, bonus = config.goal_exp_growth
    return level * per_level + level * bonus


def create_player(
    name: str,
    job: Job,
    catalog: Catalog,
    config: Optional[EngineConfig] = None,
) -> Player:
    """A fresh level 1 character holding the starter weapon."""
    config = config or EngineConfig()
    stats = base_stats(1, catalog.job(job), config)
    starter = catalog.starter_weapon
    return Player(
        name=name,
        job=job,
        level=1,
        hp=stats["max_hp"],
        goal_exp=goal_exp_for(1, config),
        weapon=starter.clone(),
        owned_weapon_ids=[starter.id],
        **stats,
    )


def effective_stats(combatant: Combatant, config: Optional[EngineConfig] = None) -> Combatant:
    """
    The stats a combatant fights with right now.

    Players add weapon/armor values and their enhancement steps. Players
    and bosses add buff bonuses, then apply buff multipliers. DEF never
    goes below zero. The result is a plain ``Combatant`` snapshot; write
    HP changes back to the original, never the snapshot.
    """
    config = config or EngineConfig()
    atk = combatant.atk
    defense = combatant.defense
    luk = combatant.luk

    if isinstance(combatant, Player):
        if combatant.weapon is not None:
            atk += combatant.weapon.value
            atk += combatant.enhance_level(combatant.weapon.id) * config.enhance_stat_step
        if combatant.armor is not None:
            defense += combatant.armor.value
            defense += combatant.enhance_level(combatant.armor.id) * config.enhance_stat_step

    if isinstance(combatant, (Player, Boss)):
        atk_mult = 1.0
        def_mult = 1.0
        for buff in combatant.active_buffs:
            atk += buff.bonuses.atk
            defense += buff.bonuses.defense
            luk += buff.bonuses.luk
            atk_mult *= buff.attack_multiplier
            def_mult *= buff.defense_multiplier
        atk = math.floor(atk * atk_mult)
        defense = math.floor(defense * def_mult)

    return Combatant(
        name=combatant.name,
        kind=combatant.kind,
        level=combatant.level,
        hp=combatant.hp,
        max_hp=combatant.max_hp,
        atk=atk,
        defense=max(0, defense),
        luk=luk,
        is_defending=combatant.is_defending,
    )


def spawn_monster(
    dungeon: Dungeon,
    kill_count: int,
    catalog: Catalog,
    rng: RandomSource,
    config: Optional[EngineConfig] = None,
) -> Combatant:
    """
    Roll the next monster for a dungeon.

    Every ``named_monster_interval``-th kill in the dungeon turns the
    spawn into a tougher named variant.
    """
    config = config or EngineConfig()
    template = rng.choice(catalog.monster_tier(dungeon.monster_level_offset))
    monster = Combatant(
        name=template.name,
        kind=CombatantKind.MONSTER,
        level=template.level,
        hp=template.hp,
        max_hp=template.hp,
        atk=template.atk,
        defense=template.defense,
        luk=template.luk,
    )

    if kill_count > 0 and kill_count % config.named_monster_interval == 0:
        hp = math.floor(monster.max_hp * config.named_hp_multiplier)
        monster = monster.evolve(
            name=NAMED_PREFIX + monster.name,
            hp=hp,
            max_hp=hp,
            atk=math.floor(monster.atk * config.named_stat_multiplier),
            defense=math.floor(monster.defense * config.named_stat_multiplier),
        )
    return monster


def create_boss(boss_dungeon: BossDungeon, catalog: Catalog) -> Boss:
    """Build the boss guarding a boss dungeon."""
    level = boss_dungeon.boss_level
    hp = level * BOSS_HP_PER_LEVEL
    return Boss(
        name=boss_dungeon.name,
        level=level,
        hp=hp,
        max_hp=hp,
        atk=level * BOSS_ATK_PER_LEVEL,
        defense=level * BOSS_DEF_PER_LEVEL,
        luk=level * BOSS_LUK_PER_LEVEL,
        skills=catalog.sanitize_skill_keys(boss_dungeon.skills, owner=boss_dungeon.name),
    )


def create_scarecrow(
    atk: int = 0,
    defense: int = 0,
    luk: int = 0,
    config: Optional[EngineConfig] = None,
) -> Combatant:
    """A practice dummy that can't be killed."""
    config = config or EngineConfig()
    return Combatant(
        name=SCARECROW_NAME,
        kind=CombatantKind.MONSTER,
        level=1,
        hp=config.scarecrow_hp,
        max_hp=config.scarecrow_hp,
        atk=max(0, atk),
        defense=max(0, defense),
        luk=max(0, luk),
    )
