from engine.core.config import EngineConfig
from game.battle.log import LogType
from game.battle.pets import apply_pet_start_of_turn, pet_power


def test_no_pet_does_nothing(mage, slime):
    result = apply_pet_start_of_turn(mage, slime)
    assert result.player == mage
    assert result.opponent == slime
    assert result.logs == []


def test_attack_pet_hits_for_share_of_atk(catalog, mage, slime):
    player = mage.evolve(pet=catalog.pet("cat"))
    result = apply_pet_start_of_turn(player, slime)

    # 53 effective ATK * 0.2
    assert result.opponent.hp == 30
    assert result.logs[0].type == LogType.ATTACK


def test_enhanced_pet_is_stronger(catalog, mage, slime):
    player = mage.evolve(pet=catalog.pet("cat"), enhance_levels={"cat": 2})
    assert pet_power(player, EngineConfig()) == 0.2 + 2 * 0.05

    result = apply_pet_start_of_turn(player, slime)
    assert result.opponent.hp == 40 - 15


def test_attack_pet_deals_at_least_one(catalog, mage, slime):
    weak = mage.evolve(atk=0, weapon=None, pet=catalog.pet("cat"))
    assert apply_pet_start_of_turn(weak, slime).opponent.hp == 39


def test_heal_pet(catalog, mage, slime):
    player = mage.evolve(pet=catalog.pet("fairy")).with_hp(50)
    result = apply_pet_start_of_turn(player, slime)

    assert result.player.hp == 53
    assert result.opponent == slime


def test_heal_pet_at_full_hp_is_silent(catalog, mage, slime):
    player = mage.evolve(pet=catalog.pet("fairy"))
    result = apply_pet_start_of_turn(player, slime)
    assert result.player.hp == player.max_hp
    assert result.logs == []
