"""
Save/Load system - game state persistence.

Provides:
- Save/load a ``GameSnapshot`` to JSON files
- Multiple save slots (10 by default) plus an auto-save slot
- Save integrity validation (checksum)
- Metadata side-files for slot listings
- Filtering of skill keys the current catalog no longer knows
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum, auto
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import Field, ValidationError

from engine.core.component import Component
from engine.core.events import EventBus
from game.battle.log import LogEntry
from game.battle.system import BattleState
from game.catalog import Catalog
from game.components.character import Boss, Player
from game.progression.rewards import LootDrop

logger = logging.getLogger(__name__)


class SaveEvent(Enum):
    """Save system events."""
    SAVE_STARTED = auto()
    SAVE_COMPLETED = auto()
    SAVE_FAILED = auto()
    LOAD_STARTED = auto()
    LOAD_COMPLETED = auto()
    LOAD_FAILED = auto()
    AUTO_SAVE_TRIGGERED = auto()


class GameSnapshot(Component):
    """
    Everything needed to rebuild a game session.

    Attributes:
        version: Save format version
        player: The player (outside of battle, or as of the last turn)
        battle: The battle in progress, if any
        dungeon_id: Dungeon the player is exploring
        boss_dungeon_id: Boss dungeon the player is in
        kill_counts: Monsters beaten per dungeon (drives named spawns)
        boss_cooldowns: Per boss dungeon, the clock time it reopens
        pending_loot: Drop waiting for an equip/sell/ignore decision
        recent_logs: The last log lines shown to the player
        saved_at: ISO timestamp
    """
    version: str = "1.0"
    player: Player
    battle: Optional[BattleState] = None
    dungeon_id: Optional[str] = None
    boss_dungeon_id: Optional[str] = None
    kill_counts: dict[str, int] = Field(default_factory=dict)
    boss_cooldowns: dict[str, float] = Field(default_factory=dict)
    pending_loot: Optional[LootDrop] = None
    recent_logs: list[LogEntry] = Field(default_factory=list)
    saved_at: str = ""


@dataclass
class SaveMetadata:
    """Metadata about a save file."""
    slot: int
    name: str
    timestamp: str
    player_name: str
    job: str
    level: int
    location: str = ""


@dataclass
class SaveResult:
    """
    Outcome of a save, load or delete.

    Persistence problems never raise; they come back as ``success=False``
    with a message in ``error``.
    """
    success: bool
    slot: int
    path: Optional[Path] = None
    error: Optional[str] = None
    snapshot: Optional[GameSnapshot] = None


class SaveManager:
    """
    Manages saving and loading game snapshots.

    Features:
    - 10 save slots (configurable)
    - Auto-save slot
    - Checksum validation for save integrity
    - Event publishing for save/load operations

    Usage:
        saves = SaveManager("saves", catalog=catalog, event_bus=event_bus)
        saves.save(session.snapshot(), slot=0, name="Before the boss")
        result = saves.load(0)
        if result.success:
            session = GameSession.from_snapshot(result.snapshot, catalog)
    """

    VERSION = "1.0"
    MAX_SLOTS = 10
    AUTO_SAVE_SLOT = 99  # Special slot for auto-saves

    def __init__(
        self,
        save_path: Union[str, Path] = "saves",
        catalog: Optional[Catalog] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.save_path = Path(save_path)
        self.catalog = catalog
        self.event_bus = event_bus
        self._current_slot: Optional[int] = None

    def _get_slot_path(self, slot: int) -> Path:
        return self.save_path / f"save_{slot:02d}.json"

    def _get_metadata_path(self, slot: int) -> Path:
        return self.save_path / f"save_{slot:02d}_meta.json"

    def _is_valid_slot(self, slot: int) -> bool:
        return 0 <= slot < self.MAX_SLOTS or slot == self.AUTO_SAVE_SLOT

    def _publish(self, event_type: SaveEvent, **data: Any) -> None:
        if self.event_bus:
            self.event_bus.publish(event_type, **data)

    def _fail(self, event_type: SaveEvent, slot: int, path: Optional[Path], error: str) -> SaveResult:
        logger.error(f"Slot {slot}: {error}")
        self._publish(event_type, slot=slot, error=error)
        return SaveResult(success=False, slot=slot, path=path, error=error)

    # Slots

    def get_save_slots(self) -> list[Optional[SaveMetadata]]:
        """Metadata for every regular slot (None where empty or unreadable)."""
        slots: list[Optional[SaveMetadata]] = []
        for i in range(self.MAX_SLOTS):
            slots.append(self.get_metadata(i))
        return slots

    def get_metadata(self, slot: int) -> Optional[SaveMetadata]:
        meta_path = self._get_metadata_path(slot)
        if not meta_path.exists():
            return None
        try:
            with open(meta_path, 'r', encoding='utf-8') as f:
                return SaveMetadata(**json.load(f))
        except (OSError, json.JSONDecodeError, TypeError) as e:
            logger.warning(f"Unreadable metadata for slot {slot}: {e}")
            return None

    def has_save(self, slot: int) -> bool:
        return self._get_slot_path(slot).exists()

    # Save / load

    def save(self, snapshot: GameSnapshot, slot: int, name: str = "Save") -> SaveResult:
        """
        Write a snapshot to a slot.

        Args:
            snapshot: Session state to persist
            slot: Save slot number (0-9, or AUTO_SAVE_SLOT)
            name: Display name for the save

        Returns:
            SaveResult with success flag and file path
        """
        path = self._get_slot_path(slot)
        if not self._is_valid_slot(slot):
            return self._fail(SaveEvent.SAVE_FAILED, slot, None, f"Invalid save slot: {slot}")

        self._publish(SaveEvent.SAVE_STARTED, slot=slot)

        if not snapshot.saved_at:
            snapshot = snapshot.evolve(saved_at=datetime.now().isoformat())
        snapshot = snapshot.evolve(version=self.VERSION)

        try:
            save_dict = snapshot.model_dump(mode="json")
            save_dict['checksum'] = self._calculate_checksum(save_dict)

            location = snapshot.boss_dungeon_id or snapshot.dungeon_id or ""
            metadata = SaveMetadata(
                slot=slot,
                name=name,
                timestamp=snapshot.saved_at,
                player_name=snapshot.player.name,
                job=snapshot.player.job.value,
                level=snapshot.player.level,
                location=location,
            )

            self.save_path.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(save_dict, f, indent=2)
            with open(self._get_metadata_path(slot), 'w', encoding='utf-8') as f:
                json.dump(asdict(metadata), f, indent=2)
        except (OSError, TypeError, ValueError) as e:
            return self._fail(SaveEvent.SAVE_FAILED, slot, path, f"Save failed: {e}")

        self._current_slot = slot
        logger.info(f"Saved slot {slot} to {path}")
        self._publish(SaveEvent.SAVE_COMPLETED, slot=slot)
        return SaveResult(success=True, slot=slot, path=path, snapshot=snapshot)

    def load(self, slot: int, validate: bool = True) -> SaveResult:
        """
        Read a snapshot back.

        Args:
            slot: Save slot number
            validate: Whether to check the checksum

        Returns:
            SaveResult carrying the snapshot on success
        """
        path = self._get_slot_path(slot)
        if not path.exists():
            return self._fail(SaveEvent.LOAD_FAILED, slot, path, f"No save in slot {slot}")

        self._publish(SaveEvent.LOAD_STARTED, slot=slot)

        try:
            with open(path, 'r', encoding='utf-8') as f:
                save_dict = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            return self._fail(SaveEvent.LOAD_FAILED, slot, path, f"Load failed: {e}")

        if not isinstance(save_dict, dict):
            return self._fail(SaveEvent.LOAD_FAILED, slot, path, "Save file is not a JSON object")

        checksum = save_dict.pop('checksum', None)
        if validate and (checksum is None or checksum != self._calculate_checksum(save_dict)):
            return self._fail(SaveEvent.LOAD_FAILED, slot, path, "Checksum validation failed")

        try:
            snapshot = GameSnapshot.model_validate(save_dict)
        except ValidationError as e:
            return self._fail(SaveEvent.LOAD_FAILED, slot, path, f"Invalid save data: {e}")

        if self.catalog is not None:
            snapshot = self.sanitize(snapshot)

        self._current_slot = slot
        logger.info(f"Loaded slot {slot} from {path}")
        self._publish(SaveEvent.LOAD_COMPLETED, slot=slot)
        return SaveResult(success=True, slot=slot, path=path, snapshot=snapshot)

    def delete(self, slot: int) -> SaveResult:
        """Delete a save slot and its metadata."""
        path = self._get_slot_path(slot)
        try:
            if path.exists():
                path.unlink()
            meta_path = self._get_metadata_path(slot)
            if meta_path.exists():
                meta_path.unlink()
        except OSError as e:
            logger.error(f"Could not delete slot {slot}: {e}")
            return SaveResult(success=False, slot=slot, path=path, error=str(e))
        return SaveResult(success=True, slot=slot, path=path)

    def auto_save(self, snapshot: GameSnapshot) -> SaveResult:
        """Save to the auto-save slot."""
        self._publish(SaveEvent.AUTO_SAVE_TRIGGERED)
        return self.save(snapshot, slot=self.AUTO_SAVE_SLOT, name="Auto Save")

    # Data repair

    def sanitize(self, snapshot: GameSnapshot) -> GameSnapshot:
        """
        Drop skill keys the catalog doesn't know.

        Saves outlive data changes; a removed skill must not break the
        player or a boss mid-battle.
        """
        changes: dict[str, Any] = {"player": self._sanitize_skills(snapshot.player)}
        if snapshot.battle is not None:
            battle = snapshot.battle.evolve(player=self._sanitize_skills(snapshot.battle.player))
            if battle.boss is not None:
                battle = battle.evolve(boss=self._sanitize_skills(battle.boss))
            changes["battle"] = battle
        return snapshot.evolve(**changes)

    def _sanitize_skills(self, owner: Union[Player, Boss]) -> Union[Player, Boss]:
        skills = self.catalog.sanitize_skill_keys(owner.skills, owner=owner.name)
        if skills == owner.skills:
            return owner
        known = set(skills)
        changes: dict[str, Any] = {
            "skills": skills,
            "skill_cooldowns": {k: v for k, v in owner.skill_cooldowns.items() if k in known},
        }
        if isinstance(owner, Player):
            changes["skill_levels"] = {k: v for k, v in owner.skill_levels.items() if k in known}
        return owner.evolve(**changes)

    # Checksum validation

    def _calculate_checksum(self, data: dict) -> str:
        """Calculate checksum for save data."""
        # Create a deterministic JSON string
        json_str = json.dumps(data, sort_keys=True, separators=(',', ':'))
        hash_bytes = hashlib.sha256(json_str.encode('utf-8')).digest()
        return base64.b64encode(hash_bytes).decode('ascii')

    def validate_save(self, slot: int) -> bool:
        """
        Validate a save file's integrity.

        Returns:
            True if save is valid, False if corrupted or missing
        """
        path = self._get_slot_path(slot)
        if not path.exists():
            return False
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError):
            return False
        if not isinstance(data, dict):
            return False
        checksum = data.pop('checksum', None)
        return checksum is not None and checksum == self._calculate_checksum(data)

    @property
    def current_slot(self) -> Optional[int]:
        return self._current_slot
