"""
Game session - the single controller a front end talks to.

A session owns the player, the dungeon context around battles (current
dungeon, kill counters, boss cooldowns, pending loot) and one
``BattleSystem``. Front ends send ``PlayerAction`` requests through
``submit`` and render the log entries that come back.
"""

from __future__ import annotations

import logging
import math
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from engine.core.config import EngineConfig
from engine.core.events import EventBus
from engine.core.rng import RandomSource
from game.battle.actor import create_boss, create_player, create_scarecrow, spawn_monster
from game.battle.log import BattleLog, LogEntry, LogType
from game.battle.system import BattlePhase, BattleState, BattleSystem, EncounterType, TurnResult
from game.catalog import Catalog, CatalogError, default_catalog
from game.components.character import Player
from game.components.inventory import EquipmentType
from game.components.job import Job
from game.errors import ActionError
from game.inventory import equipment
from game.progression import rewards as reward_rules
from game.progression import skills as skill_rules
from game.progression.rewards import LootDecision, LootDrop, VictoryRewards
from game.save.manager import GameSnapshot

logger = logging.getLogger(__name__)


class PlayerAction(str, Enum):
    """Input vocabulary of the game."""
    ATTACK = "attack"
    DEFEND = "defend"
    RECOVER = "recover"
    ESCAPE = "escape"
    USE_SKILL = "use_skill"
    CONTINUE = "continue"
    EXIT_DUNGEON = "exit_dungeon"


@dataclass
class SessionResult:
    """
    Outcome of one session request.

    Attributes:
        logs: Ordered log entries to show
        error: Why the request was refused, if it was
        battle: Battle state after the request (None outside battle)
        rewards: Victory rewards, on the request that won a battle
    """
    logs: list[LogEntry] = field(default_factory=list)
    error: Optional[ActionError] = None
    battle: Optional[BattleState] = None
    rewards: Optional[VictoryRewards] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class GameSession:
    """
    Player plus everything that happens around a battle.

    Usage:
        session = GameSession.new_game("Aria", Job.MAGE)
        session.enter_dungeon("forest")
        result = session.submit(PlayerAction.ATTACK)
    """

    def __init__(
        self,
        player: Player,
        catalog: Optional[Catalog] = None,
        config: Optional[EngineConfig] = None,
        rng: Optional[RandomSource] = None,
        event_bus: Optional[EventBus] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.catalog = catalog or default_catalog()
        self.config = config or EngineConfig()
        self.rng = rng or RandomSource()
        self.events = event_bus
        self.clock = clock

        self.player = player
        self.battle = BattleSystem(self.catalog, self.rng, self.config, event_bus)

        self.dungeon_id: Optional[str] = None
        self.boss_dungeon_id: Optional[str] = None
        self.kill_counts: dict[str, int] = {}
        self.boss_cooldowns: dict[str, float] = {}
        self.pending_loot: Optional[LootDrop] = None
        self.history: deque[LogEntry] = deque(maxlen=self.config.recent_log_size)

    @classmethod
    def new_game(
        cls,
        name: str,
        job: Job,
        catalog: Optional[Catalog] = None,
        config: Optional[EngineConfig] = None,
        **kwargs,
    ) -> GameSession:
        """Create a level 1 character and a session around it."""
        catalog = catalog or default_catalog()
        player = create_player(name, job, catalog, config)
        session = cls(player, catalog=catalog, config=config, **kwargs)
        log = BattleLog()
        log.add(f"{player.name} the {job.value} sets out on an adventure...", LogType.NORMAL)
        session._record(SessionResult(logs=log.entries))
        return session

    @property
    def in_battle(self) -> bool:
        return self.battle.is_active

    # Input vocabulary

    def submit(self, action: PlayerAction, skill_key: Optional[str] = None) -> SessionResult:
        """
        Dispatch one input request.

        Args:
            action: What the player wants to do
            skill_key: Skill to use, for USE_SKILL
        """
        if action == PlayerAction.ATTACK:
            return self._battle_call(self.battle.attack)
        if action == PlayerAction.DEFEND:
            return self._battle_call(self.battle.defend)
        if action == PlayerAction.RECOVER:
            return self._battle_call(self.battle.recover)
        if action == PlayerAction.ESCAPE:
            return self._battle_call(self.battle.escape)
        if action == PlayerAction.USE_SKILL:
            if not skill_key:
                return self._refuse("Choose a skill to use.", ActionError.UNKNOWN_SKILL)
            return self._battle_call(lambda: self.battle.use_skill(skill_key))
        if action == PlayerAction.CONTINUE:
            return self.continue_battle()
        if action == PlayerAction.EXIT_DUNGEON:
            return self.exit_dungeon()
        raise ValueError(f"Unknown action: {action}")

    # Dungeons and battles

    def enter_dungeon(self, dungeon_id: str) -> SessionResult:
        """Enter a dungeon and fight its first monster."""
        blocked = self._check_idle()
        if blocked is not None:
            return blocked
        try:
            dungeon = self.catalog.dungeon(dungeon_id)
        except CatalogError:
            return self._refuse("No such dungeon.", ActionError.UNKNOWN_DUNGEON)
        if self.player.level < dungeon.required_level:
            return self._refuse(
                f"{dungeon.name} requires level {dungeon.required_level}.",
                ActionError.LEVEL_TOO_LOW,
            )

        self.dungeon_id = dungeon.id
        self.boss_dungeon_id = None
        log = BattleLog()
        log.add(f"You enter {dungeon.name}.", LogType.NORMAL)
        return self._fight_next_monster(log)

    def continue_battle(self) -> SessionResult:
        """Fight the next monster of the current dungeon."""
        blocked = self._check_idle()
        if blocked is not None:
            return blocked
        if self.dungeon_id is None:
            return self._refuse("You are not in a dungeon.", ActionError.NOT_IN_DUNGEON)
        return self._fight_next_monster(BattleLog())

    def _fight_next_monster(self, log: BattleLog) -> SessionResult:
        dungeon = self.catalog.dungeon(self.dungeon_id)
        kills = self.kill_counts.get(dungeon.id, 0)
        monster = spawn_monster(dungeon, kills, self.catalog, self.rng, self.config)
        result = self.battle.start(self.player, monster, EncounterType.MONSTER, dungeon.id)
        return self._after_battle_call(result, log)

    def enter_boss(self, boss_id: str) -> SessionResult:
        """Challenge a boss dungeon."""
        blocked = self._check_idle()
        if blocked is not None:
            return blocked
        try:
            boss_dungeon = self.catalog.boss_dungeon(boss_id)
        except CatalogError:
            return self._refuse("No such boss dungeon.", ActionError.UNKNOWN_DUNGEON)
        if self.player.level < boss_dungeon.required_level:
            return self._refuse(
                f"{boss_dungeon.name} requires level {boss_dungeon.required_level}.",
                ActionError.LEVEL_TOO_LOW,
            )
        remaining = self.boss_cooldown_remaining(boss_id)
        if remaining > 0:
            minutes = math.ceil(remaining / 60)
            return self._refuse(
                f"{boss_dungeon.name} is sealed for another {minutes} minute(s).",
                ActionError.BOSS_ON_COOLDOWN,
            )

        self.boss_dungeon_id = boss_dungeon.id
        self.dungeon_id = None
        log = BattleLog()
        log.add(f"You step into {boss_dungeon.name}...", LogType.NORMAL)
        boss = create_boss(boss_dungeon, self.catalog)
        result = self.battle.start(self.player, boss, EncounterType.BOSS, boss_dungeon.id)
        return self._after_battle_call(result, log)

    def boss_cooldown_remaining(self, boss_id: str) -> float:
        """Seconds until a boss can be fought again (0 when open)."""
        ready_at = self.boss_cooldowns.get(boss_id)
        if ready_at is None:
            return 0.0
        return max(0.0, ready_at - self.clock())

    def start_scarecrow(self, atk: int = 0, defense: int = 0, luk: int = 0) -> SessionResult:
        """Practice against an unkillable dummy."""
        blocked = self._check_idle()
        if blocked is not None:
            return blocked
        log = BattleLog()
        log.add("You enter the training ground.", LogType.NORMAL)
        scarecrow = create_scarecrow(atk, defense, luk, self.config)
        result = self.battle.start(self.player, scarecrow, EncounterType.SCARECROW)
        return self._after_battle_call(result, log)

    def exit_dungeon(self) -> SessionResult:
        """Leave the current dungeon between fights."""
        if self.in_battle:
            return self._refuse("You can't leave in the middle of a battle.", ActionError.BATTLE_IN_PROGRESS)
        if self.dungeon_id is None and self.boss_dungeon_id is None:
            return self._refuse("You are not in a dungeon.", ActionError.NOT_IN_DUNGEON)
        self.dungeon_id = None
        self.boss_dungeon_id = None
        self.battle.clear()
        log = BattleLog()
        log.add("You left the dungeon.", LogType.NORMAL)
        return self._record(SessionResult(logs=log.entries))

    def _battle_call(self, call: Callable[[], TurnResult]) -> SessionResult:
        return self._after_battle_call(call(), BattleLog())

    def _after_battle_call(self, result: TurnResult, log: BattleLog) -> SessionResult:
        log.extend(result.logs)
        state = result.state
        if state is not None and result.ok:
            self.player = state.player
            if state.phase.is_terminal:
                self._on_battle_end(state, result.rewards)
        return self._record(SessionResult(
            logs=log.entries,
            error=result.error,
            battle=state,
            rewards=result.rewards,
        ))

    def _on_battle_end(self, state: BattleState, rewards: Optional[VictoryRewards]) -> None:
        if state.encounter == EncounterType.SCARECROW:
            return

        if state.phase == BattlePhase.VICTORY:
            if state.encounter == EncounterType.BOSS:
                self.boss_cooldowns[state.dungeon_id] = self.clock() + self.config.boss_cooldown_seconds
                self.boss_dungeon_id = None
            elif state.dungeon_id is not None:
                self.kill_counts[state.dungeon_id] = self.kill_counts.get(state.dungeon_id, 0) + 1
            if rewards is not None and rewards.loot is not None:
                self.pending_loot = rewards.loot
        else:
            self.dungeon_id = None
            self.boss_dungeon_id = None

    # Between battles

    def rest(self) -> SessionResult:
        """Heal part of max HP outside of battle."""
        if self.in_battle:
            return self._refuse("You can't rest during a battle.", ActionError.BATTLE_IN_PROGRESS)
        healed = self.player.healed(math.floor(self.player.max_hp * self.config.rest_percent))
        log = BattleLog()
        log.add(f"You rest and recover {healed.hp - self.player.hp} HP. (HP: {healed.hp})", LogType.NORMAL)
        self.player = healed
        return self._record(SessionResult(logs=log.entries))

    def learn_skill(self, key: str) -> SessionResult:
        if self.in_battle:
            return self._refuse("Not during a battle.", ActionError.BATTLE_IN_PROGRESS)
        result = skill_rules.learn_skill(self.player, key, self.catalog, self.config)
        self.player = result.player
        return self._record(SessionResult(logs=result.logs, error=result.error))

    def resolve_loot(self, decision: LootDecision) -> SessionResult:
        """Equip, sell or keep the item dropped by the last victory."""
        if self.pending_loot is None:
            return self._refuse("There is nothing to pick up.", ActionError.NO_PENDING_LOOT)
        player, logs, error = reward_rules.resolve_loot(self.player, self.pending_loot, decision, self.config)
        if error is None:
            self.pending_loot = None
            self.player = player
        return self._record(SessionResult(logs=logs, error=error))

    def buy_item(self, item_id: str) -> SessionResult:
        return self._outside_battle(lambda p: equipment.buy_item(p, item_id, self.catalog))

    def buy_pet(self, pet_id: str) -> SessionResult:
        return self._outside_battle(lambda p: equipment.buy_pet(p, pet_id, self.catalog))

    def equip_item(self, item_id: str) -> SessionResult:
        return self._outside_battle(lambda p: equipment.equip_item(p, item_id, self.catalog))

    def unequip(self, item_type: EquipmentType) -> SessionResult:
        return self._outside_battle(lambda p: equipment.unequip(p, item_type))

    def equip_pet(self, pet_id: str) -> SessionResult:
        return self._outside_battle(lambda p: equipment.equip_pet(p, pet_id, self.catalog))

    def unequip_pet(self) -> SessionResult:
        return self._outside_battle(equipment.unequip_pet)

    def enhance(self, target: str) -> SessionResult:
        """Enhance the equipped "weapon", "armor" or "pet"."""
        return self._outside_battle(lambda p: equipment.enhance(p, target, self.config))

    def _outside_battle(self, change: Callable[[Player], equipment.EquipResult]) -> SessionResult:
        if self.in_battle:
            return self._refuse("Not during a battle.", ActionError.BATTLE_IN_PROGRESS)
        player, logs, error = change(self.player)
        self.player = player
        return self._record(SessionResult(logs=logs, error=error))

    # Plumbing

    def _check_idle(self) -> Optional[SessionResult]:
        if self.in_battle:
            return self._refuse("A battle is already in progress.", ActionError.BATTLE_IN_PROGRESS)
        if self.pending_loot is not None:
            return self._refuse("Decide what to do with the dropped item first.", ActionError.LOOT_PENDING)
        return None

    def _refuse(self, message: str, error: ActionError) -> SessionResult:
        log = BattleLog()
        log.add(message, LogType.FAIL)
        return self._record(SessionResult(logs=log.entries, error=error, battle=self.battle.state))

    def _record(self, result: SessionResult) -> SessionResult:
        self.history.extend(result.logs)
        return result

    # Persistence

    def snapshot(self) -> GameSnapshot:
        """Capture the session for saving."""
        battle = self.battle.state if self.in_battle else None
        return GameSnapshot(
            player=self.player.clone(),
            battle=battle.clone() if battle is not None else None,
            dungeon_id=self.dungeon_id,
            boss_dungeon_id=self.boss_dungeon_id,
            kill_counts=dict(self.kill_counts),
            boss_cooldowns=dict(self.boss_cooldowns),
            pending_loot=self.pending_loot.clone() if self.pending_loot is not None else None,
            recent_logs=[entry.clone() for entry in self.history],
            saved_at=datetime.now().isoformat(),
        )

    @classmethod
    def from_snapshot(
        cls,
        snapshot: GameSnapshot,
        catalog: Optional[Catalog] = None,
        config: Optional[EngineConfig] = None,
        **kwargs,
    ) -> GameSession:
        """Rebuild a session, resuming any battle that was in progress."""
        session = cls(snapshot.player.clone(), catalog=catalog, config=config, **kwargs)
        session.dungeon_id = snapshot.dungeon_id
        session.boss_dungeon_id = snapshot.boss_dungeon_id
        session.kill_counts = dict(snapshot.kill_counts)
        session.boss_cooldowns = dict(snapshot.boss_cooldowns)
        session.pending_loot = snapshot.pending_loot
        session.history.extend(snapshot.recent_logs)
        if snapshot.battle is not None:
            session.battle.resume(snapshot.battle)
            session.player = snapshot.battle.player
        logger.info(f"Session restored for {session.player.name} (Lv.{session.player.level})")
        return session
