import pytest

from game.battle.ledger import set_cooldown
from game.components.combat import EffectType
from game.errors import ActionError
from game.progression.skills import build_buff, check_usable, learn_skill, use_skill


def test_learn_skill(catalog, mage):
    result = learn_skill(mage.evolve(skill_points=2), "fireball", catalog)

    assert result.ok
    assert result.player.skills == ["fireball"]
    assert result.player.skill_level("fireball") == 1
    assert result.player.skill_points == 1

    upgraded = learn_skill(result.player, "fireball", catalog)
    assert upgraded.player.skills == ["fireball"]
    assert upgraded.player.skill_level("fireball") == 2
    assert "now level 2" in upgraded.logs[0].message


@pytest.mark.parametrize("key, error", [
    ("nope", ActionError.UNKNOWN_SKILL),
    ("meteor", ActionError.LEVEL_TOO_LOW),
    ("power_strike", ActionError.JOB_NOT_ALLOWED),
])
def test_learn_rejections(catalog, mage, key, error):
    player = mage.evolve(skill_points=1)
    result = learn_skill(player, key, catalog)
    assert result.error == error
    assert result.player == player


def test_learn_needs_points(catalog, mage):
    assert learn_skill(mage, "fireball", catalog).error == ActionError.NO_SKILL_POINTS


def test_learn_stops_at_max_level(catalog, mage):
    player = mage.evolve(skill_points=1, skills=["fireball"], skill_levels={"fireball": 5})
    assert learn_skill(player, "fireball", catalog).error == ActionError.SKILL_MAX_LEVEL


def test_check_usable(catalog, mage):
    player = mage.evolve(skills=["fireball"])
    assert check_usable(player, "fireball", catalog) is None
    assert check_usable(player, "ghost", catalog) == ActionError.UNKNOWN_SKILL
    assert check_usable(player, "hex", catalog) == ActionError.SKILL_NOT_LEARNED
    cooling = set_cooldown(player, "fireball", 1)
    assert check_usable(cooling, "fireball", catalog) == ActionError.SKILL_ON_COOLDOWN


def test_attack_skill_scales_with_level(catalog, mage, slime, neutral_rng):
    player = mage.evolve(skills=["fireball"], skill_levels={"fireball": 1})
    outcome = use_skill(catalog.skill("fireball"), player, slime, neutral_rng)

    # floor(53 * 1.45) = 76, minus 10 DEF
    assert outcome.damage == 66
    assert outcome.battle_over
    assert outcome.opponent.hp == 0
    assert outcome.caster.skill_cooldowns["fireball"] == 1


def test_heal_skill(catalog, mage, slime, neutral_rng):
    player = mage.evolve(skills=["recovery"], skill_levels={"recovery": 1}).with_hp(10)
    outcome = use_skill(catalog.skill("recovery"), player, slime, neutral_rng)
    assert outcome.caster.hp == player.max_hp
    assert outcome.opponent == slime


def test_buff_skill(catalog, mage, slime, neutral_rng):
    outcome = use_skill(catalog.skill("hex"), mage.evolve(skills=["hex"]), slime, neutral_rng)
    buff = outcome.caster.active_buffs[0]
    assert buff.source_skill == "hex"
    assert buff.remaining_turns == 3
    assert buff.weaken_percent == 0.3
    assert outcome.caster.skill_cooldowns["hex"] == 5


def test_instant_effects(catalog, rogue, mage, slime, neutral_rng):
    stun = use_skill(catalog.skill("nerve_strike"), rogue, slime, neutral_rng)
    assert stun.stun_turns == 1
    assert stun.opponent == slime

    stop = use_skill(catalog.skill("the_world"), mage, slime, neutral_rng)
    assert stop.extra_turn
    assert stop.caster.active_buffs == []


def test_build_buff(catalog):
    assert build_buff(catalog.skill("the_world")) is None
    iron_will = build_buff(catalog.skill("iron_will"))
    assert iron_will.counter_ratio == 0.5
    assert iron_will.bonuses.defense == 10
    berserk = build_buff(catalog.skill("berserk"))
    assert berserk.effect.type == EffectType.TRADE_OFF.value
    assert berserk.attack_multiplier == 1.8
