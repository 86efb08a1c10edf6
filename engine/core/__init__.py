"""
Core engine module.

Exports:
- Component: Pydantic base for value types
- EngineConfig: Balance constants and logging setup
- EventBus, Event: Event system
- RandomSource: Seedable bounded RNG
"""

from engine.core.component import Component
from engine.core.config import EngineConfig
from engine.core.events import EventBus, Event
from engine.core.rng import RandomSource

__all__ = [
    "Component",
    "EngineConfig",
    "EventBus",
    "Event",
    "RandomSource",
]
