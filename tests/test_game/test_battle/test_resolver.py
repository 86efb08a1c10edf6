import pytest

from engine.core.rng import RandomSource
from game.battle.log import LogType
from game.battle.resolver import crit_rate, evade_rate, resolve_attack
from game.components.character import Combatant, CombatantKind


def fighter(name="Fighter", kind=CombatantKind.MONSTER, hp=100, atk=10, defense=0, luk=0, defending=False):
    return Combatant(
        name=name, kind=kind, hp=hp, max_hp=max(hp, 1), atk=atk, defense=defense, luk=luk,
        is_defending=defending,
    )


def test_damage_clamps_hp_and_ends_battle(neutral_rng):
    attacker = fighter("Ogre", atk=90)
    defender = fighter("Slime", hp=40)

    result = resolve_attack(attacker, defender, neutral_rng)

    assert result.damage == 90
    assert result.defender.hp == 0
    assert result.did_hit
    assert result.battle_over
    assert result.logs[0].type == LogType.TRY_TO_ATTACK
    assert result.logs[-1].type == LogType.ATTACK


def test_defending_halves_and_clears_stance(neutral_rng):
    attacker = fighter("Ogre", atk=90)
    defender = fighter("Hero", kind=CombatantKind.PLAYER, hp=100, defending=True)

    result = resolve_attack(attacker, defender, neutral_rng)

    assert result.damage == 45
    assert result.defender.hp == 55
    assert not result.defender.is_defending


def test_monster_blocked_attack_stops(neutral_rng):
    attacker = fighter("Slime", atk=10)
    defender = fighter("Hero", kind=CombatantKind.PLAYER, defense=50)

    result = resolve_attack(attacker, defender, neutral_rng)

    assert result.damage == 0
    assert not result.did_hit
    assert result.defender.hp == 100
    assert result.logs[-1].type == LogType.FAIL


def test_player_blocked_attack_can_still_crit(scripted_rng):
    # noise 0, noise 0, crit roll 1 (crit rate 20)
    rng = scripted_rng(0, 0, 1)
    attacker = fighter("Hero", kind=CombatantKind.PLAYER, atk=10, luk=10)
    defender = fighter("Golem", defense=50)

    result = resolve_attack(attacker, defender, rng)

    assert result.critical
    assert result.damage == 0
    assert result.did_hit


def test_guaranteed_hit_is_never_evaded():
    attacker = fighter("Hero", kind=CombatantKind.PLAYER, atk=40, luk=0)
    defender = fighter("Ghost", hp=1000, defense=10, luk=500)
    for seed in range(50):
        result = resolve_attack(attacker, defender, RandomSource(seed=seed), guaranteed_hit=True)
        assert not result.evaded
        assert result.did_hit
        assert result.critical
        assert result.damage >= 20


def test_guaranteed_hit_minimum_and_bonus(neutral_rng):
    attacker = fighter("Hero", kind=CombatantKind.PLAYER, atk=53, luk=10)
    defender = fighter("Golem", hp=500, defense=1000)

    result = resolve_attack(attacker, defender, neutral_rng, guaranteed_hit=True)

    # max(0, 53 // 2) = 26, plus 26 * 0.5 + 10 = 23
    assert result.damage == 49
    assert result.defender.hp == 451


def test_evasion(scripted_rng):
    # noise 0, noise 0, crit roll 100, evade roll 1
    rng = scripted_rng(0, 0, 100, 1)
    attacker = fighter("Slime", atk=50, luk=0)
    defender = fighter("Hero", kind=CombatantKind.PLAYER, hp=100, luk=10)

    result = resolve_attack(attacker, defender, rng)

    assert result.evaded
    assert not result.did_hit
    assert result.defender.hp == 100


def test_seeded_resolution_is_deterministic():
    attacker = fighter("Hero", kind=CombatantKind.PLAYER, atk=60, luk=12)
    defender = fighter("Wolf", hp=300, defense=20, luk=8)

    first = resolve_attack(attacker, defender, RandomSource(seed=7))
    second = resolve_attack(attacker, defender, RandomSource(seed=7))

    assert first.damage == second.damage
    assert first.logs == second.logs
    assert first.defender == second.defender


def test_hp_stays_in_range():
    attacker = fighter("Ogre", atk=200, luk=30)
    defender = fighter("Hero", kind=CombatantKind.PLAYER, hp=150, defense=20, luk=5)
    for seed in range(100):
        result = resolve_attack(attacker, defender, RandomSource(seed=seed))
        assert 0 <= result.defender.hp <= result.defender.max_hp
        assert result.battle_over == (result.defender.hp == 0)


def test_evade_rate_table():
    player = fighter("Hero", kind=CombatantKind.PLAYER, luk=10)
    assert evade_rate(player, fighter("Bat", luk=30)) == 15  # 50% scaled by 0.3
    assert evade_rate(player, fighter("Slug", luk=0)) == 0
    assert evade_rate(fighter("Bat", luk=10), fighter("Hero", kind=CombatantKind.PLAYER, luk=15)) == 7
    assert evade_rate(fighter("Bat", luk=10), fighter("Hero", kind=CombatantKind.PLAYER, luk=5)) == 1


def test_crit_rate():
    assert crit_rate(fighter(luk=20), fighter(luk=5)) == 30
    assert crit_rate(fighter(luk=5), fighter(luk=20)) < 0
