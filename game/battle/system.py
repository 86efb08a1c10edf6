"""
Battle system - the turn engine for one player-vs-opponent encounter.

Every public entry point runs a whole exchange to completion: the
player's action, the opponent's reply (repeated on time stop, skipped on
stun), and the start of the player's next turn. The result is a new
``BattleState`` plus the ordered log of what happened.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Optional

from engine.core.component import Component
from engine.core.config import EngineConfig
from engine.core.events import EventBus
from engine.core.rng import RandomSource
from game.battle.actions import check_guard, escape_chance, perform_strike, retaliate
from game.battle.ledger import clear_buffs, set_cooldown, tick
from game.battle.log import BattleLog, LogEntry, LogType
from game.battle.pets import apply_pet_start_of_turn
from game.catalog import Catalog
from game.components.character import Boss, Combatant, Player
from game.components.skill import SkillKind
from game.errors import ActionError
from game.progression.rewards import VictoryRewards, apply_defeat, resolve_victory
from game.progression.skills import check_usable, use_skill as run_skill

logger = logging.getLogger(__name__)


class BattlePhase(str, Enum):
    """Where the turn engine is."""
    AWAITING_PLAYER_ACTION = "awaiting_player_action"
    RESOLVING_PLAYER_ACTION = "resolving_player_action"
    RESOLVING_OPPONENT_ACTION = "resolving_opponent_action"
    VICTORY = "victory"
    DEFEAT = "defeat"
    ESCAPED = "escaped"

    @property
    def is_terminal(self) -> bool:
        return self in (BattlePhase.VICTORY, BattlePhase.DEFEAT, BattlePhase.ESCAPED)


class EncounterType(str, Enum):
    MONSTER = "monster"
    BOSS = "boss"
    SCARECROW = "scarecrow"


class BattleEvent(Enum):
    """Events published by the battle system."""
    BATTLE_STARTED = auto()
    TURN_RESOLVED = auto()
    ACTION_REJECTED = auto()
    BATTLE_ENDED = auto()


class BattleState(Component):
    """
    Full state of one encounter.

    Exactly one of ``monster`` / ``boss`` is set. The state is a value:
    the engine never edits it in place, it produces the next one.

    Attributes:
        encounter: Monster, boss or scarecrow practice
        phase: Current step of the turn cycle
        player: The player as it stands in this battle
        monster: Monster or scarecrow opponent
        boss: Boss opponent
        dungeon_id: Dungeon (or boss dungeon) the battle happens in
        turn: Player turns started so far
        consecutive_misses: Player basic attacks in a row that missed
        recovery_charges: In-battle recovers left
        opponent_stunned_turns: Opponent turns to skip
        player_stunned_turns: Player turns to skip
    """
    encounter: EncounterType = EncounterType.MONSTER
    phase: BattlePhase = BattlePhase.AWAITING_PLAYER_ACTION
    player: Player
    monster: Optional[Combatant] = None
    boss: Optional[Boss] = None
    dungeon_id: Optional[str] = None
    turn: int = 1
    consecutive_misses: int = 0
    recovery_charges: int = 5
    opponent_stunned_turns: int = 0
    player_stunned_turns: int = 0

    @property
    def opponent(self) -> Combatant:
        if self.boss is not None:
            return self.boss
        return self.monster

    @property
    def is_scarecrow(self) -> bool:
        return self.encounter == EncounterType.SCARECROW

    def with_opponent(self, opponent: Combatant) -> BattleState:
        if self.boss is not None:
            return self.evolve(boss=opponent)
        return self.evolve(monster=opponent)


@dataclass
class TurnResult:
    """
    What one engine call produced.

    A rejected request carries ``error`` and leaves ``state`` exactly as
    it was. ``rewards`` is set only on the call that won the battle.
    """
    state: Optional[BattleState]
    logs: list[LogEntry] = field(default_factory=list)
    error: Optional[ActionError] = None
    rewards: Optional[VictoryRewards] = None

    @property
    def ok(self) -> bool:
        return self.error is None


REJECTION_MESSAGES = {
    ActionError.BUSY: "Still resolving the last action.",
    ActionError.NO_ACTIVE_BATTLE: "There is no battle going on.",
    ActionError.NOT_PLAYER_TURN: "It's not your turn.",
    ActionError.BATTLE_IN_PROGRESS: "A battle is already in progress.",
    ActionError.NO_RECOVERY_CHARGES: "No recovery charges left.",
    ActionError.UNKNOWN_SKILL: "No such skill.",
    ActionError.SKILL_NOT_LEARNED: "You haven't learned that skill.",
    ActionError.SKILL_ON_COOLDOWN: "That skill is still on cooldown.",
}


class BattleSystem:
    """
    Turn-based battle controller.

    Manages:
    - Battle start and turn order
    - Player actions (attack, defend, recover, skill, escape)
    - Opponent turns, including boss skills
    - Win/lose/escape handling and rewards

    Usage:
        battle = BattleSystem(catalog, rng=RandomSource(seed=1))
        battle.start(player, monster)
        result = battle.attack()
        for entry in result.logs:
            print(entry.message)
    """

    def __init__(
        self,
        catalog: Catalog,
        rng: Optional[RandomSource] = None,
        config: Optional[EngineConfig] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.catalog = catalog
        self.rng = rng or RandomSource()
        self.config = config or EngineConfig()
        self.events = event_bus

        self.state: Optional[BattleState] = None
        self._processing = False
        self._rewards: Optional[VictoryRewards] = None

    @property
    def is_active(self) -> bool:
        return self.state is not None and not self.state.phase.is_terminal

    @property
    def is_processing(self) -> bool:
        return self._processing

    # Lifecycle

    def start(
        self,
        player: Player,
        opponent: Combatant,
        encounter: Optional[EncounterType] = None,
        dungeon_id: Optional[str] = None,
    ) -> TurnResult:
        """
        Start a battle.

        Bosses always act first and the scarecrow never does; otherwise a
        coin flip decides. When the opponent wins the flip its first turn
        is resolved before this returns.

        Args:
            player: The player entering the fight
            opponent: Monster, boss or scarecrow
            encounter: Defaults to BOSS for a ``Boss``, MONSTER otherwise
            dungeon_id: Where the fight happens

        Returns:
            TurnResult with the state awaiting the player's first action
        """
        if self._processing:
            return self._reject(ActionError.BUSY)
        if self.is_active:
            return self._reject(ActionError.BATTLE_IN_PROGRESS)

        if encounter is None:
            encounter = EncounterType.BOSS if isinstance(opponent, Boss) else EncounterType.MONSTER
        is_boss = isinstance(opponent, Boss)

        self._processing = True
        self._rewards = None
        try:
            log = BattleLog()
            state = BattleState(
                encounter=encounter,
                player=player.evolve(is_defending=False),
                monster=None if is_boss else opponent,
                boss=opponent if is_boss else None,
                dungeon_id=dungeon_id,
                recovery_charges=self.config.recovery_charges,
            )
            log.add(f"{opponent.name} (Lv.{opponent.level}) appears!", LogType.APPEAR)
            logger.debug(f"Battle started: {player.name} vs {opponent.name} ({encounter.value})")
            self._publish(BattleEvent.BATTLE_STARTED, state=state)

            if encounter == EncounterType.BOSS:
                player_first = False
            elif encounter == EncounterType.SCARECROW:
                player_first = True
            else:
                player_first = self.rng.roll(self.config.player_first_chance)

            if player_first:
                log.add(f"--- {player.name}'s turn ---", LogType.NORMAL)
            else:
                log.add(f"{opponent.name} moves first!", LogType.NORMAL)
                state = self._opponent_phase(state, log)

            return self._commit(state, log)
        finally:
            self._processing = False

    def resume(self, state: BattleState) -> None:
        """Continue a battle restored from a save."""
        self.state = state
        self._processing = False

    def clear(self) -> None:
        """Forget the current (finished) battle."""
        self.state = None
        self._rewards = None

    # Player actions

    def attack(self) -> TurnResult:
        """Basic attack against the opponent."""
        return self._player_action(self._do_attack)

    def defend(self) -> TurnResult:
        """Halve the next incoming hit."""
        return self._player_action(self._do_defend)

    def recover(self) -> TurnResult:
        """Spend a recovery charge to heal part of max HP."""
        return self._player_action(self._do_recover)

    def use_skill(self, key: str) -> TurnResult:
        """Use a learned, ready skill."""
        return self._player_action(lambda state, log: self._do_skill(state, log, key))

    def escape(self) -> TurnResult:
        """Try to run. Leaving the scarecrow always works."""
        return self._player_action(self._do_escape)

    # Entry point plumbing

    def _player_action(
        self,
        action: Callable[[BattleState, BattleLog], BattleState | ActionError],
    ) -> TurnResult:
        error = self._check_ready()
        if error is not None:
            return self._reject(error)

        self._processing = True
        self._rewards = None
        try:
            log = BattleLog()
            state = self.state.evolve(phase=BattlePhase.RESOLVING_PLAYER_ACTION)
            outcome = action(state, log)
            if isinstance(outcome, ActionError):
                self._processing = False
                return self._reject(outcome)
            return self._commit(outcome, log)
        finally:
            self._processing = False

    def _check_ready(self) -> Optional[ActionError]:
        if self._processing:
            return ActionError.BUSY
        if self.state is None or self.state.phase.is_terminal:
            return ActionError.NO_ACTIVE_BATTLE
        if self.state.phase != BattlePhase.AWAITING_PLAYER_ACTION:
            return ActionError.NOT_PLAYER_TURN
        return None

    def _reject(self, error: ActionError) -> TurnResult:
        log = BattleLog()
        log.add(REJECTION_MESSAGES.get(error, error.value), LogType.FAIL)
        logger.debug(f"Rejected battle request: {error.value}")
        self._publish(BattleEvent.ACTION_REJECTED, error=error)
        return TurnResult(state=self.state, logs=log.entries, error=error)

    def _commit(self, state: BattleState, log: BattleLog) -> TurnResult:
        self.state = state
        result = TurnResult(state=state, logs=log.entries, rewards=self._rewards)
        self._publish(BattleEvent.TURN_RESOLVED, state=state, logs=result.logs)
        if state.phase.is_terminal:
            self._publish(BattleEvent.BATTLE_ENDED, state=state, phase=state.phase, rewards=self._rewards)
        return result

    def _publish(self, event_type: BattleEvent, **data) -> None:
        if self.events is not None:
            self.events.publish(event_type, **data)

    # Action bodies: each returns the state after the whole exchange

    def _do_attack(self, state: BattleState, log: BattleLog) -> BattleState:
        player = state.player
        opponent = state.opponent

        guard = check_guard(opponent, player.name)
        if guard.negated:
            log.extend(guard.logs)
            return self._player_acted(state.with_opponent(guard.target), log)

        bonus = state.consecutive_misses >= self.config.miss_streak_for_bonus
        strike = perform_strike(player, opponent, self.rng, self.config, guaranteed_hit=bonus)
        log.extend(strike.logs)
        back = retaliate(strike.attacker, strike.defender, strike.damage, self.config)
        log.extend(back.logs)

        misses = 0 if strike.did_hit else state.consecutive_misses + 1
        if misses >= self.config.miss_streak_for_bonus:
            log.add("Your focus peaks. The next attack is sure to land!", LogType.CRITICAL)

        state = state.evolve(player=back.attacker, consecutive_misses=misses).with_opponent(back.defender)
        return self._player_acted(state, log)

    def _do_defend(self, state: BattleState, log: BattleLog) -> BattleState:
        log.add("You brace yourself. Incoming damage is halved.", LogType.NORMAL)
        state = state.evolve(player=state.player.evolve(is_defending=True))
        return self._player_acted(state, log)

    def _do_recover(self, state: BattleState, log: BattleLog) -> BattleState | ActionError:
        if state.recovery_charges <= 0:
            return ActionError.NO_RECOVERY_CHARGES

        player = state.player
        healed = player.healed(math.floor(player.max_hp * self.config.recovery_percent))
        charges = state.recovery_charges - 1
        log.add(
            f"You recover {healed.hp - player.hp} HP. (HP: {healed.hp}, {charges} charge(s) left)",
            LogType.NORMAL,
        )
        state = state.evolve(player=healed, recovery_charges=charges)
        return self._player_acted(state, log)

    def _do_skill(self, state: BattleState, log: BattleLog, key: str) -> BattleState | ActionError:
        error = check_usable(state.player, key, self.catalog)
        if error is not None:
            return error

        skill = self.catalog.require_skill(key)
        opponent = state.opponent

        if skill.kind == SkillKind.ATTACK:
            guard = check_guard(opponent, state.player.name)
            if guard.negated:
                player = set_cooldown(state.player, key, skill.cooldown)
                log.add(f"{player.name} uses {skill.name}!", LogType.VICTORY)
                log.extend(guard.logs)
                state = state.evolve(player=player).with_opponent(guard.target)
                return self._player_acted(state, log)

        outcome = run_skill(skill, state.player, opponent, self.rng, self.config)
        log.extend(outcome.logs)
        player, opponent = outcome.caster, outcome.opponent

        if skill.kind == SkillKind.ATTACK:
            back = retaliate(player, opponent, outcome.damage, self.config)
            log.extend(back.logs)
            player, opponent = back.attacker, back.defender

        state = state.evolve(
            player=player,
            opponent_stunned_turns=state.opponent_stunned_turns + outcome.stun_turns,
        ).with_opponent(opponent)
        return self._player_acted(state, log, extra_turn=outcome.extra_turn)

    def _do_escape(self, state: BattleState, log: BattleLog) -> BattleState:
        if state.is_scarecrow:
            log.add("You leave the training ground, fully rested.", LogType.NORMAL)
            state = state.evolve(player=state.player.restored())
            return self._finish(state, BattlePhase.ESCAPED)

        chance = escape_chance(state.player, state.opponent, self.config)
        if self.rng.roll(chance):
            log.add("You ran away from the battle...", LogType.FAIL)
            return self._finish(state, BattlePhase.ESCAPED)

        log.add("You couldn't get away!", LogType.FAIL)
        return self._player_acted(state, log)

    # Turn flow

    def _player_acted(self, state: BattleState, log: BattleLog, extra_turn: bool = False) -> BattleState:
        """Check for a finished battle, then hand the turn over."""
        if not state.opponent.is_alive:
            if state.is_scarecrow:
                state = self._revive_scarecrow(state, log)
                return self._start_player_turn(state, log)
            return self._win(state, log)
        if not state.player.is_alive:
            return self._lose(state, log)

        if extra_turn:
            return self._start_player_turn(state, log)
        return self._opponent_phase(state, log)

    def _opponent_phase(self, state: BattleState, log: BattleLog) -> BattleState:
        """Run opponent turns until control returns to the player or the battle ends."""
        state = state.evolve(phase=BattlePhase.RESOLVING_OPPONENT_ACTION)
        while True:
            state, again = self._opponent_turn(state, log)

            if not state.player.is_alive:
                return self._lose(state, log)
            if not state.opponent.is_alive:
                if not state.is_scarecrow:
                    return self._win(state, log)
                state = self._revive_scarecrow(state, log)
                break
            if not again:
                break

        return self._start_player_turn(state, log)

    def _opponent_turn(self, state: BattleState, log: BattleLog) -> tuple[BattleState, bool]:
        """
        One opponent action.

        Returns:
            (new state, whether the opponent acts again right away)
        """
        opponent = state.opponent
        log.add(f"--- {opponent.name}'s turn ---", LogType.NORMAL)

        if state.boss is not None:
            state = state.evolve(boss=tick(state.boss))
            opponent = state.boss

        if state.opponent_stunned_turns > 0:
            log.add(f"{opponent.name} is stunned and can't move!", LogType.FAIL)
            return state.evolve(opponent_stunned_turns=state.opponent_stunned_turns - 1), False

        guard = check_guard(state.player, opponent.name)
        if guard.negated:
            log.extend(guard.logs)
            return state.evolve(player=guard.target), False

        if state.boss is not None:
            state, handled, again = self._boss_skill(state, log)
            if handled:
                return state, again

        strike = perform_strike(state.opponent, state.player, self.rng, self.config)
        log.extend(strike.logs)
        back = retaliate(strike.attacker, strike.defender, strike.damage, self.config)
        log.extend(back.logs)
        return state.evolve(player=back.defender).with_opponent(back.attacker), False

    def _boss_skill(self, state: BattleState, log: BattleLog) -> tuple[BattleState, bool, bool]:
        """
        Maybe use a boss skill.

        Attack skills and time stop replace the basic attack; buff, heal
        and stun skills are followed by it.

        Returns:
            (new state, whether the turn is over, whether the boss acts again)
        """
        boss = state.boss
        valid = self.catalog.sanitize_skill_keys(boss.skills, owner=boss.name)
        if valid != boss.skills:
            dropped = [key for key in boss.skills if key not in valid]
            if dropped:
                log.add(
                    f"{boss.name} has unknown skills and will not use them: {', '.join(dropped)}",
                    LogType.FAIL,
                )
            boss = boss.evolve(skills=valid)
            state = state.evolve(boss=boss)

        ready = [key for key in valid if boss.skill_cooldowns.get(key, 0) <= 0]
        if not ready or not self.rng.roll(self.config.boss_skill_chance):
            return state, False, False

        skill = self.catalog.require_skill(self.rng.choice(ready))
        outcome = run_skill(skill, boss, state.player, self.rng, self.config)
        log.extend(outcome.logs)
        boss, player = outcome.caster, outcome.opponent

        if outcome.stun_turns:
            state = state.evolve(player_stunned_turns=state.player_stunned_turns + outcome.stun_turns)
        if outcome.extra_turn:
            return state.evolve(boss=boss, player=player), True, True

        if skill.kind == SkillKind.ATTACK:
            back = retaliate(boss, player, outcome.damage, self.config)
            log.extend(back.logs)
            return state.evolve(boss=back.attacker, player=back.defender), True, False

        return state.evolve(boss=boss, player=player), False, False

    def _start_player_turn(self, state: BattleState, log: BattleLog) -> BattleState:
        """
        Tick the player's ledger, drop the guard, let the pet act.

        Every player turn starts here, including one granted by time stop,
        the same way every opponent turn ticks the boss ledger first.
        """
        player = tick(state.player).evolve(is_defending=False)
        log.add(f"--- {player.name}'s turn ---", LogType.NORMAL)
        state = state.evolve(
            player=player,
            turn=state.turn + 1,
            phase=BattlePhase.AWAITING_PLAYER_ACTION,
        )

        pet = apply_pet_start_of_turn(player, state.opponent, self.config)
        log.extend(pet.logs)
        state = state.evolve(player=pet.player).with_opponent(pet.opponent)

        if not state.opponent.is_alive:
            if not state.is_scarecrow:
                return self._win(state, log)
            state = self._revive_scarecrow(state, log)

        if state.player_stunned_turns > 0:
            log.add("You are stunned and can't move!", LogType.FAIL)
            state = state.evolve(player_stunned_turns=state.player_stunned_turns - 1)
            return self._opponent_phase(state, log)

        return state

    def _revive_scarecrow(self, state: BattleState, log: BattleLog) -> BattleState:
        log.add("The scarecrow falls, then springs right back up!", LogType.VICTORY)
        return state.evolve(monster=state.monster.restored())

    # Endings

    def _win(self, state: BattleState, log: BattleLog) -> BattleState:
        player, rewards, reward_logs = resolve_victory(
            state.player,
            state.opponent,
            state.encounter == EncounterType.BOSS,
            self.catalog,
            self.rng,
            self.config,
        )
        log.extend(reward_logs)
        self._rewards = rewards
        logger.info(f"{player.name} defeated {state.opponent.name}: +{rewards.exp} exp, +{rewards.gold} gold")
        return self._finish(state.evolve(player=player), BattlePhase.VICTORY)

    def _lose(self, state: BattleState, log: BattleLog) -> BattleState:
        if state.is_scarecrow:
            log.add("The scarecrow got the better of you. Both of you recover.", LogType.NORMAL)
            return state.evolve(
                player=state.player.restored().evolve(is_defending=False),
                monster=state.monster.restored(),
                phase=BattlePhase.AWAITING_PLAYER_ACTION,
            )

        player, defeat_logs = apply_defeat(state.player, self.config)
        log.extend(defeat_logs)
        logger.info(f"{player.name} was defeated by {state.opponent.name}")
        return self._finish(state.evolve(player=player), BattlePhase.DEFEAT)

    def _finish(self, state: BattleState, phase: BattlePhase) -> BattleState:
        """Close the battle: buffs and per-battle counters do not carry over."""
        player = clear_buffs(state.player).evolve(is_defending=False)
        return state.evolve(
            player=player,
            phase=phase,
            consecutive_misses=0,
            recovery_charges=self.config.recovery_charges,
            opponent_stunned_turns=0,
            player_stunned_turns=0,
        )
