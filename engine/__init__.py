"""
Dungeon RPG Engine

Game-agnostic building blocks for a turn-based RPG:
- Component base for immutable value types
- Typed event bus
- Seedable random source
- Balance configuration
- JSON data loading with schema validation

Quick Start:
    from engine.core import EngineConfig, EventBus, RandomSource

    config = EngineConfig(escape_chance=40)
    config.configure_logging()
    rng = RandomSource(seed=7)
"""

__version__ = "0.1.0"
__author__ = "Developer"

# Re-export core components for convenience
from engine.core import (
    Component,
    EngineConfig,
    Event,
    EventBus,
    RandomSource,
)

__all__ = [
    "Component",
    "EngineConfig",
    "Event",
    "EventBus",
    "RandomSource",
]
