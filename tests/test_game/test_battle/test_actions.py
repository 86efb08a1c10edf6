from game.battle.actions import check_guard, escape_chance, perform_strike, retaliate, weakened
from game.battle.ledger import add_buff
from game.components.character import Boss
from game.components.combat import (
    ActiveBuff,
    BarrierEffect,
    ChargeEffect,
    CounterEffect,
    EvadeEffect,
    LifestealEffect,
    MultiStrikeEffect,
    ReflectEffect,
    TrueStrikeEffect,
    WeakenEffect,
)


def buff(effect, turns=3, key="test_skill"):
    return ActiveBuff(source_skill=key, remaining_turns=turns, effect=effect)


def test_barrier_blocks_once(mage):
    player = add_buff(mage, buff(BarrierEffect()))

    guard = check_guard(player, "Slime")
    assert guard.negated
    assert guard.target.active_buffs == []

    assert not check_guard(guard.target, "Slime").negated


def test_evade_lasts(mage):
    player = add_buff(mage, buff(EvadeEffect(), turns=1))
    guard = check_guard(player, "Slime")
    assert guard.negated
    assert len(guard.target.active_buffs) == 1


def test_monsters_never_guard(slime):
    assert not check_guard(slime, "Hero").negated


def test_basic_strike(mage, slime, neutral_rng):
    result = perform_strike(mage, slime, neutral_rng)
    # 53 ATK - 10 DEF
    assert result.damage == 43
    assert result.defender.hp == 0
    assert result.did_hit


def test_charge_is_spent(mage, golem, neutral_rng):
    player = add_buff(mage, buff(ChargeEffect(multiplier=0.5)))
    golem = golem.evolve(defense=50)

    result = perform_strike(player, golem, neutral_rng)

    # floor(53 * 1.5) = 79, minus 50 DEF
    assert result.damage == 29
    assert result.attacker.active_buffs == []


def test_true_strike_ignores_defense(mage, golem, neutral_rng):
    player = add_buff(mage, buff(TrueStrikeEffect()))
    result = perform_strike(player, golem, neutral_rng)
    assert result.damage == 53
    assert result.attacker.active_buffs == []


def test_multi_strike_follow_up(mage, golem, neutral_rng):
    player = add_buff(mage, buff(MultiStrikeEffect(multiplier=0.8)))
    golem = golem.evolve(defense=0)

    result = perform_strike(player, golem, neutral_rng)

    # 53 + floor(53 * 0.8)
    assert result.damage == 53 + 42
    assert result.defender.hp == 500 - 95
    assert result.attacker.active_buffs == []


def test_multi_strike_spent_on_miss(mage, golem, neutral_rng):
    player = add_buff(mage, buff(MultiStrikeEffect(multiplier=0.8)))
    result = perform_strike(player, golem, neutral_rng)
    assert result.damage == 0
    assert result.attacker.active_buffs == []


def test_lifesteal(mage, golem, neutral_rng):
    player = add_buff(mage, buff(LifestealEffect(percent=0.3))).with_hp(10)
    result = perform_strike(player, golem.evolve(defense=0), neutral_rng)
    assert result.attacker.hp == 10 + 15


def test_weaken_on_defender_lowers_attacker(mage, slime, neutral_rng):
    player = add_buff(mage, buff(WeakenEffect(percent=0.3)))
    result = perform_strike(slime, player, neutral_rng)
    # 45 -> 31 ATK against 37 DEF is blocked
    assert result.damage == 0
    assert result.defender.hp == player.hp


def test_weakened_floor():
    assert weakened(45, 0.3) == 31
    assert weakened(10, 1.0) == 1


def test_reflect_and_counter(mage, slime):
    player = add_buff(mage, buff(ReflectEffect(percent=0.3)))
    player = add_buff(player, buff(CounterEffect(ratio=0.5), key="iron_will"))
    slime = slime.evolve(hp=100, max_hp=100)

    result = retaliate(slime, player, 100)

    # 30 reflected, then floor(53 * 0.5) = 26 countered
    assert result.attacker.hp == 100 - 30 - 26
    assert len(result.logs) == 2


def test_reflect_applies_after_fatal_hit(mage):
    boss = Boss(name="Thorn Knight", hp=0, max_hp=100, atk=10, defense=10,
                active_buffs=[buff(ReflectEffect(percent=0.5)), buff(CounterEffect(ratio=1.0))])
    result = retaliate(mage, boss, 40)
    # Reflect still fires, counter needs the defender standing
    assert result.attacker.hp == mage.hp - 20


def test_no_retaliation_without_damage(mage, slime):
    player = add_buff(mage, buff(ReflectEffect(percent=0.3)))
    result = retaliate(slime, player, 0)
    assert result.attacker == slime
    assert result.logs == []


def test_escape_chance(mage, slime):
    assert escape_chance(mage, slime) == 100
    assert escape_chance(mage, slime.evolve(luk=6)) == 50
    assert escape_chance(mage, slime.evolve(luk=5)) == 100
