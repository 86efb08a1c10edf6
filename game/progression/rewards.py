"""
Rewards and progression - experience, gold, level-up, defeat penalty, loot.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Optional

from engine.core.component import Component
from engine.core.config import EngineConfig
from engine.core.rng import RandomSource
from game.battle.actor import base_stats, goal_exp_for
from game.battle.log import BattleLog, LogEntry, LogType
from game.catalog import STARTER_WEAPON_ID, Catalog
from game.components.character import Combatant, Player
from game.components.inventory import EquipmentItem, EquipmentType, LootPool
from game.errors import ActionError


class LootDrop(Component):
    """
    An item offered to the player after a victory.

    Attributes:
        item: The dropped item
        is_duplicate: The player already owns it
        is_usable: The player's job and level allow equipping it
        sell_price: Gold the player gets for selling it
    """
    item: EquipmentItem
    is_duplicate: bool = False
    is_usable: bool = True
    sell_price: int = 0


class LootDecision(str, Enum):
    EQUIP = "equip"
    SELL = "sell"
    IGNORE = "ignore"


class VictoryRewards(Component):
    exp: int = 0
    gold: int = 0
    leveled_up: bool = False
    loot: Optional[LootDrop] = None


def roll_exp_gold(
    opponent_level: int,
    is_boss: bool,
    rng: RandomSource,
    config: Optional[EngineConfig] = None,
) -> tuple[int, int]:
    """Experience and gold for beating an opponent of a given level."""
    config = config or EngineConfig()
    if is_boss:
        exp_range, exp_per_level = config.boss_exp_range, config.boss_exp_per_level
        gold_range, gold_per_level = config.boss_gold_range, config.boss_gold_per_level
    else:
        exp_range, exp_per_level = config.monster_exp_range, config.monster_exp_per_level
        gold_range, gold_per_level = config.monster_gold_range, config.monster_gold_per_level

    exp = rng.randint(*exp_range) + opponent_level * exp_per_level
    gold = rng.randint(*gold_range) + opponent_level * gold_per_level
    return exp, gold


def check_level_up(
    player: Player,
    catalog: Catalog,
    config: Optional[EngineConfig] = None,
) -> tuple[Player, list[LogEntry]]:
    """
    Level up once if experience reached the goal.

    Stats are recomputed for the new level, HP is fully restored, one
    skill point is granted and experience starts over. Calling it again
    right away is a no-op.
    """
    config = config or EngineConfig()
    log = BattleLog()
    if player.exp < player.goal_exp:
        return player, log.entries

    level = player.level + 1
    stats = base_stats(level, catalog.job(player.job), config)
    player = player.evolve(
        level=level,
        hp=stats["max_hp"],
        exp=0,
        goal_exp=goal_exp_for(level, config),
        skill_points=player.skill_points + 1,
        **stats,
    )
    log.add(f"Level up! You are now level {level}.", LogType.LEVEL_UP)
    log.add(
        f"HP {player.max_hp} / ATK {player.atk} / DEF {player.defense} / LUK {player.luk}",
        LogType.LEVEL_UP,
    )
    return player, log.entries


def roll_loot(
    player: Player,
    is_boss: bool,
    catalog: Catalog,
    rng: RandomSource,
    config: Optional[EngineConfig] = None,
) -> Optional[LootDrop]:
    """Independent drop roll layered on top of exp and gold."""
    config = config or EngineConfig()
    chance = config.boss_drop_chance if is_boss else config.monster_drop_chance
    pool = catalog.loot_pool(LootPool.BOSS if is_boss else LootPool.NORMAL)
    if not pool or not rng.roll(chance):
        return None

    item = rng.choice(pool)
    owned = player.owned_weapon_ids if item.type == EquipmentType.WEAPON else player.owned_armor_ids
    return LootDrop(
        item=item.clone(),
        is_duplicate=item.id in owned,
        is_usable=item.usable_by(player.job, player.level),
        sell_price=math.floor(item.price * config.sell_ratio),
    )


def resolve_victory(
    player: Player,
    opponent: Combatant,
    is_boss: bool,
    catalog: Catalog,
    rng: RandomSource,
    config: Optional[EngineConfig] = None,
) -> tuple[Player, VictoryRewards, list[LogEntry]]:
    """Grant exp and gold, count the win, level up, then roll for loot."""
    config = config or EngineConfig()
    log = BattleLog()
    log.add(f"You defeated {opponent.name}!", LogType.VICTORY)

    exp, gold = roll_exp_gold(opponent.level, is_boss, rng, config)
    player = player.evolve(exp=player.exp + exp, gold=player.gold + gold, wins=player.wins + 1)
    log.add(f"Gained {exp} EXP.", LogType.GAIN_EXP)
    log.add(f"Gained {gold} gold.", LogType.GAIN_MONEY)

    level_before = player.level
    player, level_logs = check_level_up(player, catalog, config)
    log.extend(level_logs)

    loot = roll_loot(player, is_boss, catalog, rng, config)
    if loot is not None:
        log.add(f"{opponent.name} dropped {loot.item.name}!", LogType.VICTORY)

    rewards = VictoryRewards(exp=exp, gold=gold, leveled_up=player.level > level_before, loot=loot)
    return player, rewards, log.entries


def apply_defeat(player: Player, config: Optional[EngineConfig] = None) -> tuple[Player, list[LogEntry]]:
    """Lose a share of experience, count the loss and get back up at full HP."""
    config = config or EngineConfig()
    log = BattleLog()
    exp = math.floor(player.exp * config.defeat_exp_ratio)
    log.add("You were defeated...", LogType.DEFEAT)
    log.add(f"Lost {player.exp - exp} EXP. You wake up fully healed.", LogType.DEFEAT)
    player = player.evolve(exp=exp, losses=player.losses + 1).restored()
    return player, log.entries


def _grant_ownership(player: Player, item: EquipmentItem) -> Player:
    if item.type == EquipmentType.WEAPON:
        if item.id not in player.owned_weapon_ids:
            return player.evolve(owned_weapon_ids=[*player.owned_weapon_ids, item.id])
    elif item.id not in player.owned_armor_ids:
        return player.evolve(owned_armor_ids=[*player.owned_armor_ids, item.id])
    return player


def resolve_loot(
    player: Player,
    drop: LootDrop,
    decision: LootDecision,
    config: Optional[EngineConfig] = None,
) -> tuple[Player, list[LogEntry], Optional[ActionError]]:
    """
    Apply the player's choice for a dropped item.

    equip: the replaced item (unless it is the starter weapon) is sold
    and the new one is owned and equipped. sell: gold only; the item can
    drop again. ignore: the item is owned but stays in the bag.
    """
    config = config or EngineConfig()
    log = BattleLog()
    item = drop.item

    if decision == LootDecision.EQUIP:
        if not drop.is_usable:
            log.add(f"You can't equip {item.name}.", LogType.FAIL)
            return player, log.entries, ActionError.ITEM_NOT_USABLE
        slot = "weapon" if item.type == EquipmentType.WEAPON else "armor"
        old: Optional[EquipmentItem] = getattr(player, slot)
        if old is not None and old.id != STARTER_WEAPON_ID:
            refund = math.floor(old.price * config.sell_ratio)
            player = player.evolve(gold=player.gold + refund)
            log.add(f"Sold your old {old.name} for {refund} gold.", LogType.GAIN_MONEY)
        player = _grant_ownership(player, item).evolve(**{slot: item.clone()})
        log.add(f"Equipped {item.name}!", LogType.VICTORY)
    elif decision == LootDecision.SELL:
        player = player.evolve(gold=player.gold + drop.sell_price)
        log.add(f"Sold {item.name} for {drop.sell_price} gold.", LogType.GAIN_MONEY)
    else:
        player = _grant_ownership(player, item)
        log.add(f"Left {item.name} in your bag.", LogType.FAIL)

    return player, log.entries, None
