import pytest

from game.catalog import BossDungeon, Catalog, CatalogError, STARTER_WEAPON_ID
from game.components.inventory import EquipmentType, LootPool
from game.components.job import Job
from game.components.skill import SkillDefinition, SkillKind


def test_packaged_catalog_loads(catalog):
    assert [d.id for d in catalog.dungeons] == ["forest", "cave", "mountain", "abyss", "hell", "hellcastle"]
    assert [b.id for b in catalog.boss_dungeons][0] == "boss_5"
    assert catalog.max_tier == 5
    assert catalog.starter_weapon.id == STARTER_WEAPON_ID


def test_skills_for_job_sorted_by_level(catalog):
    mage_skills = catalog.skills_for(Job.MAGE)
    assert mage_skills[0].key == "fireball"
    assert all(s.allows(Job.MAGE) for s in mage_skills)
    levels = [s.required_level for s in mage_skills]
    assert levels == sorted(levels)
    assert "power_strike" not in [s.key for s in mage_skills]


def test_skill_effects_are_typed(catalog):
    hex_skill = catalog.skill("hex")
    assert hex_skill.kind == SkillKind.BUFF
    assert hex_skill.effect.value == 0.3
    assert catalog.skill("mark_target").bonuses.luk == 5
    assert catalog.skill("assassinate").guaranteed_crit


def test_monster_tier_clamps(catalog):
    assert catalog.monster_tier(99) == catalog.monster_tier(5)
    assert catalog.monster_tier(-3) == catalog.monster_tier(0)
    assert catalog.monster_tier(0)[0].name == "Slime"


def test_unknown_lookups(catalog):
    with pytest.raises(CatalogError):
        catalog.dungeon("moon")
    with pytest.raises(CatalogError):
        catalog.boss_dungeon("boss_999")
    with pytest.raises(CatalogError):
        catalog.require_skill("nope")
    assert catalog.skill("nope") is None
    assert catalog.item("nope") is None
    assert catalog.pet("nope") is None


def test_sanitize_skill_keys_drops_unknown_and_duplicates(catalog):
    keys = catalog.sanitize_skill_keys(["fireball", "ghost", "fireball", "hex"], owner="test")
    assert keys == ["fireball", "hex"]


def test_boss_skill_lists_checked_on_load():
    slash = SkillDefinition(key="slash", name="Cleave", kind=SkillKind.ATTACK, cooldown=3)
    catalog = Catalog(
        skills=[slash],
        boss_dungeons=[BossDungeon(id="b", name="Test Boss", skills=["slash", "removed_skill"])],
    )
    assert catalog.boss_dungeon("b").skills == ["slash"]


def test_loot_pools(catalog):
    normal = catalog.loot_pool(LootPool.NORMAL)
    boss = catalog.loot_pool(LootPool.BOSS)
    assert normal and boss
    assert STARTER_WEAPON_ID not in [e.id for e in normal + boss]
    assert all(e.type == EquipmentType.WEAPON for e in catalog.items_of(EquipmentType.WEAPON))


def test_jobs(catalog):
    mage = catalog.job(Job.MAGE)
    assert mage.modifiers.atk == 1.5
    assert mage.bonus_atk == 10


def test_empty_catalog_has_no_starter():
    with pytest.raises(CatalogError):
        Catalog().starter_weapon
    with pytest.raises(CatalogError):
        Catalog().monster_tier(0)
