"""
Save module - game state persistence.

Provides:
- Save/load game snapshots
- Multiple save slots (10 by default)
- Auto-save slot
- Save metadata
- Checksum validation
"""

from game.save.manager import (
    SaveManager,
    SaveMetadata,
    SaveResult,
    GameSnapshot,
    SaveEvent,
)

__all__ = [
    "SaveManager",
    "SaveMetadata",
    "SaveResult",
    "GameSnapshot",
    "SaveEvent",
]
