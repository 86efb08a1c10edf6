"""
Typed, read-only view of the static game data.

The ``Database`` loads and schema-checks raw JSON; the ``Catalog`` turns
it into components and cross-checks references between categories
(boss skill lists against the skill table). Nothing in the game ever
mutates catalog objects; everything handed out is a copy or immutable
by convention.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Optional

from pydantic import Field

from engine.core.component import Component
from engine.resources.database import Database
from game.components.combat import SkillEffect, StatBonus
from game.components.inventory import EquipmentItem, EquipmentType, LootPool, Pet
from game.components.job import Job, JobProfile, StatModifiers
from game.components.skill import SkillDefinition

logger = logging.getLogger(__name__)

DEFAULT_DATA_PATH = Path(__file__).parent / "data"
STARTER_WEAPON_ID = "w_starter_club"


class CatalogError(ValueError):
    """A lookup referenced data that does not exist."""


class MonsterTemplate(Component):
    """One row of a monster tier table."""
    name: str
    level: int = Field(ge=1)
    hp: int = Field(ge=1)
    atk: int
    defense: int
    luk: int = 0


class Dungeon(Component):
    id: str
    name: str
    description: str = ""
    required_level: int = 1
    monster_level_offset: int = 0


class BossDungeon(Component):
    id: str
    name: str
    description: str = ""
    required_level: int = 1
    boss_level: int = 1
    skills: list[str] = Field(default_factory=list)


def _stat_bonus(raw: Optional[dict[str, Any]]) -> StatBonus:
    raw = raw or {}
    return StatBonus(atk=raw.get("atk", 0), defense=raw.get("def", 0), luk=raw.get("luk", 0))


def _skill_from_record(record: dict[str, Any]) -> SkillDefinition:
    effect = record.get("effect")
    return SkillDefinition(
        key=record["id"],
        name=record["name"],
        description=record.get("description", ""),
        kind=record["kind"],
        cooldown=record["cooldown"],
        required_level=record["required_level"],
        allowed_jobs=record.get("allowed_jobs"),
        damage_multiplier=record.get("damage_multiplier"),
        growth_per_level=record.get("growth_per_level", 0.0),
        duration=record.get("duration"),
        max_level=record.get("max_level"),
        guaranteed_crit=record.get("guaranteed_crit", False),
        bonuses=_stat_bonus(record.get("bonuses")),
        effect=SkillEffect(**effect) if effect else None,
    )


def _monster_from_record(record: dict[str, Any]) -> MonsterTemplate:
    return MonsterTemplate(
        name=record["name"],
        level=record["level"],
        hp=record["hp"],
        atk=record["atk"],
        defense=record["def"],
        luk=record["luk"],
    )


def _job_from_record(record: dict[str, Any]) -> JobProfile:
    mods = record["modifiers"]
    bonus = record["bonus_percent"]
    return JobProfile(
        job=record["id"],
        name=record["name"],
        modifiers=StatModifiers(hp=mods["hp"], atk=mods["atk"], defense=mods["def"], luk=mods["luk"]),
        bonus_atk=bonus["atk"],
        bonus_def=bonus["def"],
        bonus_luk=bonus["luk"],
    )


class Catalog:
    """
    All static data the rules consume.

    Usage:
        catalog = Catalog.load()
        fireball = catalog.skill("fireball")
        tier = catalog.monster_tier(dungeon.monster_level_offset)
    """

    def __init__(
        self,
        skills: Iterable[SkillDefinition] = (),
        monster_tiers: Optional[dict[int, list[MonsterTemplate]]] = None,
        equipment: Iterable[EquipmentItem] = (),
        pets: Iterable[Pet] = (),
        dungeons: Iterable[Dungeon] = (),
        boss_dungeons: Iterable[BossDungeon] = (),
        jobs: Iterable[JobProfile] = (),
    ):
        self._skills: dict[str, SkillDefinition] = {s.key: s for s in skills}
        self._monster_tiers: dict[int, list[MonsterTemplate]] = dict(monster_tiers or {})
        self._equipment: dict[str, EquipmentItem] = {e.id: e for e in equipment}
        self._pets: dict[str, Pet] = {p.id: p for p in pets}
        self._dungeons: dict[str, Dungeon] = {d.id: d for d in dungeons}
        self._jobs: dict[Job, JobProfile] = {j.job: j for j in jobs}

        # Boss skill lists are checked once, here, not at every use
        self._boss_dungeons: dict[str, BossDungeon] = {}
        for boss in boss_dungeons:
            skills_ok = self.sanitize_skill_keys(boss.skills, owner=boss.name)
            self._boss_dungeons[boss.id] = boss.evolve(skills=skills_ok)

    @classmethod
    def from_database(cls, database: Database) -> Catalog:
        tiers: dict[int, list[MonsterTemplate]] = {}
        for record in database.monsters.values():
            tiers[record["tier"]] = [_monster_from_record(m) for m in record["monsters"]]

        return cls(
            skills=[_skill_from_record(r) for r in database.skills.values()],
            monster_tiers=tiers,
            equipment=[EquipmentItem(**r) for r in database.equipment.values()],
            pets=[Pet(**r) for r in database.pets.values()],
            dungeons=[Dungeon(**r) for r in database.dungeons.values()],
            boss_dungeons=[BossDungeon(**r) for r in database.bosses.values()],
            jobs=[_job_from_record(r) for r in database.jobs.values()],
        )

    @classmethod
    def load(cls, data_path: Path | str | None = None) -> Catalog:
        """Load and validate the catalog from a data directory."""
        database = Database(data_path or DEFAULT_DATA_PATH)
        database.load_all()
        return cls.from_database(database)

    # Skills

    @property
    def skill_keys(self) -> list[str]:
        return list(self._skills)

    def has_skill(self, key: str) -> bool:
        return key in self._skills

    def skill(self, key: str) -> Optional[SkillDefinition]:
        return self._skills.get(key)

    def require_skill(self, key: str) -> SkillDefinition:
        skill = self._skills.get(key)
        if skill is None:
            raise CatalogError(f"Unknown skill: {key}")
        return skill

    def skills_for(self, job: Job) -> list[SkillDefinition]:
        """Skills a job may learn, by required level."""
        return sorted(
            (s for s in self._skills.values() if s.allows(job)),
            key=lambda s: (s.required_level, s.key),
        )

    def sanitize_skill_keys(self, keys: Iterable[str], owner: str = "") -> list[str]:
        """
        Drop unknown and duplicate skill keys, keeping order.

        Unknown keys are a data inconsistency (stale save, edited data);
        they are logged and the owner keeps its remaining skills.
        """
        clean: list[str] = []
        for key in keys:
            if key not in self._skills:
                logger.warning(f"Unknown skill '{key}' on {owner or 'combatant'} ignored")
                continue
            if key not in clean:
                clean.append(key)
        return clean

    # Monsters and dungeons

    @property
    def max_tier(self) -> int:
        return max(self._monster_tiers) if self._monster_tiers else 0

    def monster_tier(self, offset: int) -> list[MonsterTemplate]:
        """Monster table for a dungeon offset, clamped to the known tiers."""
        if not self._monster_tiers:
            raise CatalogError("No monster tiers loaded")
        tier = max(min(self._monster_tiers), min(offset, self.max_tier))
        while tier not in self._monster_tiers:
            tier -= 1
        return list(self._monster_tiers[tier])

    @property
    def dungeons(self) -> list[Dungeon]:
        return sorted(self._dungeons.values(), key=lambda d: d.required_level)

    def dungeon(self, dungeon_id: str) -> Dungeon:
        dungeon = self._dungeons.get(dungeon_id)
        if dungeon is None:
            raise CatalogError(f"Unknown dungeon: {dungeon_id}")
        return dungeon

    @property
    def boss_dungeons(self) -> list[BossDungeon]:
        return sorted(self._boss_dungeons.values(), key=lambda b: b.boss_level)

    def boss_dungeon(self, boss_id: str) -> BossDungeon:
        boss = self._boss_dungeons.get(boss_id)
        if boss is None:
            raise CatalogError(f"Unknown boss dungeon: {boss_id}")
        return boss

    # Equipment, pets, jobs

    def item(self, item_id: str) -> Optional[EquipmentItem]:
        return self._equipment.get(item_id)

    def items_of(self, item_type: EquipmentType) -> list[EquipmentItem]:
        return [e for e in self._equipment.values() if e.type == item_type]

    def loot_pool(self, pool: LootPool) -> list[EquipmentItem]:
        return [e for e in self._equipment.values() if e.loot_pool == pool]

    @property
    def starter_weapon(self) -> EquipmentItem:
        weapon = self._equipment.get(STARTER_WEAPON_ID)
        if weapon is None:
            raise CatalogError(f"Starter weapon '{STARTER_WEAPON_ID}' missing from catalog")
        return weapon

    def pet(self, pet_id: str) -> Optional[Pet]:
        return self._pets.get(pet_id)

    @property
    def pets(self) -> list[Pet]:
        return list(self._pets.values())

    def job(self, job: Job) -> JobProfile:
        profile = self._jobs.get(job)
        if profile is None:
            raise CatalogError(f"No profile for job: {job}")
        return profile


@lru_cache(maxsize=1)
def default_catalog() -> Catalog:
    """The packaged catalog, loaded once per process."""
    return Catalog.load()
