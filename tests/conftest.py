import math

import pytest

from engine.core.config import EngineConfig
from engine.core.rng import RandomSource
from game.battle.actor import create_player
from game.catalog import Catalog
from game.components.character import Combatant, CombatantKind
from game.components.job import Job


class NeutralRandom(RandomSource):
    """
    No noise, no crits, no dodges.

    Ranges that contain zero roll zero; every other range rolls its upper
    bound, so percent rolls come up 100 and only certain chances succeed.
    ``choice`` always picks the first item.
    """

    def randint(self, low, high):
        lo = math.ceil(low)
        hi = math.floor(high)
        if hi < lo:
            return lo
        if lo <= 0 <= hi:
            return 0
        return hi


class ScriptedRandom(NeutralRandom):
    """Plays back queued values, then behaves like NeutralRandom."""

    def __init__(self, values):
        super().__init__()
        self.queue = list(values)

    def randint(self, low, high):
        if self.queue:
            return self.queue.pop(0)
        return super().randint(low, high)


@pytest.fixture(scope="session")
def catalog():
    """The packaged game data, loaded once."""
    return Catalog.load()


@pytest.fixture
def config():
    return EngineConfig()


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from engine.core.events import EventBus
    return EventBus()


@pytest.fixture
def neutral_rng():
    return NeutralRandom()


@pytest.fixture
def scripted_rng():
    """Factory: scripted_rng(1, 0) pops 1 then 0 before going neutral."""
    return lambda *values: ScriptedRandom(values)


@pytest.fixture
def mage(catalog):
    return create_player("Aria", Job.MAGE, catalog)


@pytest.fixture
def warrior(catalog):
    return create_player("Bram", Job.WARRIOR, catalog)


@pytest.fixture
def rogue(catalog):
    return create_player("Cass", Job.ROGUE, catalog)


@pytest.fixture
def slime():
    return Combatant(name="Slime", kind=CombatantKind.MONSTER, level=1, hp=40, max_hp=40, atk=45, defense=10, luk=0)


@pytest.fixture
def golem():
    """Harmless and nearly unbreakable: every hit on it is blocked."""
    return Combatant(name="Rock Golem", kind=CombatantKind.MONSTER, level=1, hp=500, max_hp=500, atk=0, defense=1000, luk=0)
