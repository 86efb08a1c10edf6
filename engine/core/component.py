"""
Component base class for battle value types.

Components are immutable-by-convention data containers. Game rules never
modify a component in place; they produce a new one with ``evolve``.
This keeps resolvers pure and makes:
- Serialization trivial
- Replays deterministic
- Testing easier

Usage:
    class Stats(Component):
        hp: int
        max_hp: int

    hurt = stats.evolve(hp=stats.hp - 10)
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict

C = TypeVar("C", bound="Component")


class Component(BaseModel):
    """
    Base class for all components.

    Components use Pydantic for:
    - Automatic validation
    - JSON serialization
    - Type hints
    - Default values

    IMPORTANT: Do NOT mutate a component that may be shared.
    Use ``evolve`` to derive a changed copy.
    """

    model_config = ConfigDict(
        # Allow arbitrary types (for references)
        arbitrary_types_allowed=True,
        # Validate on assignment
        validate_assignment=True,
        # Unknown fields are a data error
        extra='forbid',
    )

    def evolve(self: C, **changes: Any) -> C:
        """
        Return a copy with the given fields replaced.

        Nested components are deep-copied so the result never aliases
        mutable state (lists, dicts) of the original.
        """
        copied = self.model_copy(deep=True)
        if not changes:
            return copied
        return copied.model_copy(update=changes)

    def clone(self: C) -> C:
        """Create a deep copy of this component."""
        return self.model_copy(deep=True)

