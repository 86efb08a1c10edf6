import math

import pytest

from engine.core.config import EngineConfig
from engine.core.rng import RandomSource
from game.battle.actor import base_stats
from game.components.inventory import LootPool
from game.errors import ActionError
from game.progression.rewards import (
    LootDecision,
    LootDrop,
    apply_defeat,
    check_level_up,
    resolve_loot,
    resolve_victory,
    roll_exp_gold,
    roll_loot,
)


def test_exp_gold_bounds_monster():
    for seed in range(100):
        exp, gold = roll_exp_gold(5, False, RandomSource(seed=seed))
        assert 305 <= exp <= 330
        assert 160 <= gold <= 200


def test_exp_gold_bounds_boss():
    for seed in range(100):
        exp, gold = roll_exp_gold(5, True, RandomSource(seed=seed))
        assert 1100 <= exp <= 1300
        assert 700 <= gold <= 1000


def test_level_up(catalog, mage):
    player, logs = check_level_up(mage.evolve(exp=150, hp=5), catalog)

    assert player.level == 2
    assert player.exp == 0
    assert player.goal_exp == 300
    assert player.skill_points == 1
    assert player.hp == player.max_hp
    stats = base_stats(2, catalog.job(mage.job), EngineConfig())
    assert player.atk == stats["atk"]
    assert len(logs) == 2

    again, logs = check_level_up(player, catalog)
    assert again == player
    assert logs == []


def test_level_up_once_per_check(catalog, mage):
    player, _ = check_level_up(mage.evolve(exp=10_000), catalog)
    assert player.level == 2


def test_no_level_up_below_goal(catalog, mage):
    player, logs = check_level_up(mage.evolve(exp=149), catalog)
    assert player.level == 1
    assert logs == []


def test_victory(catalog, mage, slime, neutral_rng):
    player, rewards, logs = resolve_victory(mage, slime, False, catalog, neutral_rng)

    assert (rewards.exp, rewards.gold) == (90, 80)
    assert player.wins == 1
    assert not rewards.leveled_up
    assert rewards.loot is None
    assert [entry.type.value for entry in logs] == ["vic", "gainExp", "gainMoney"]


def test_defeat(mage):
    player, logs = apply_defeat(mage.evolve(exp=101).with_hp(0))
    assert player.exp == 70
    assert player.losses == 1
    assert player.hp == player.max_hp
    assert logs[0].type.value == "def"


def test_roll_loot(catalog, mage, scripted_rng):
    # Drop roll 1 succeeds, then the first item of the pool
    drop = roll_loot(mage, False, catalog, scripted_rng(1, 0))
    pool = catalog.loot_pool(LootPool.NORMAL)

    assert drop.item == pool[0]
    assert drop.sell_price == math.floor(pool[0].price * 0.5)
    assert not drop.is_duplicate


def test_no_loot_on_failed_roll(catalog, mage, neutral_rng):
    assert roll_loot(mage, True, catalog, neutral_rng) is None


def drop_of(catalog, item_id, usable=True):
    item = catalog.item(item_id)
    return LootDrop(item=item, is_usable=usable, sell_price=math.floor(item.price * 0.5))


def test_equip_loot_keeps_starter(catalog, mage):
    player, logs, error = resolve_loot(mage, drop_of(catalog, "w2"), LootDecision.EQUIP)

    assert error is None
    assert player.weapon.id == "w2"
    assert "w2" in player.owned_weapon_ids
    assert player.gold == mage.gold


def test_equip_loot_sells_replaced_item(catalog, mage):
    player = mage.evolve(weapon=catalog.item("w2"), owned_weapon_ids=["w_starter_club", "w2"])
    player, logs, error = resolve_loot(player, drop_of(catalog, "w3"), LootDecision.EQUIP)

    assert player.weapon.id == "w3"
    assert player.gold == mage.gold + 75


def test_equip_unusable_loot(catalog, mage):
    drop = drop_of(catalog, "a5", usable=False)
    player, logs, error = resolve_loot(mage, drop, LootDecision.EQUIP)
    assert error == ActionError.ITEM_NOT_USABLE
    assert player == mage


def test_sell_loot(catalog, mage):
    player, logs, error = resolve_loot(mage, drop_of(catalog, "a2"), LootDecision.SELL)
    assert player.gold == mage.gold + 90
    assert "a2" not in player.owned_armor_ids


def test_ignore_loot(catalog, mage):
    player, logs, error = resolve_loot(mage, drop_of(catalog, "a2"), LootDecision.IGNORE)
    assert player.armor is None
    assert player.owned_armor_ids == ["a2"]
    assert player.gold == mage.gold
