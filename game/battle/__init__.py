"""
Battle module - turn-based combat.

Provides:
- Attack resolution (damage, crits, evasion)
- Buff/cooldown ledger
- Actor creation and effective stats
- Strike, guard and retaliation actions
- Pet actions

The turn engine itself (``BattleSystem``) lives in ``game.battle.system``;
it depends on the progression rules, which in turn build on this package.
"""

from game.battle.log import BattleLog, LogEntry, LogType
from game.battle.resolver import AttackResult, resolve_attack
from game.battle.ledger import tick, find_buff, consume_buff, add_buff, clear_buffs
from game.battle.actor import (
    create_player,
    create_boss,
    create_scarecrow,
    spawn_monster,
    effective_stats,
)
from game.battle.actions import check_guard, perform_strike, retaliate, escape_chance
from game.battle.pets import apply_pet_start_of_turn

__all__ = [
    # Log
    "BattleLog",
    "LogEntry",
    "LogType",
    # Resolver
    "AttackResult",
    "resolve_attack",
    # Ledger
    "tick",
    "find_buff",
    "consume_buff",
    "add_buff",
    "clear_buffs",
    # Actors
    "create_player",
    "create_boss",
    "create_scarecrow",
    "spawn_monster",
    "effective_stats",
    # Actions
    "check_guard",
    "perform_strike",
    "retaliate",
    "escape_chance",
    # Pets
    "apply_pet_start_of_turn",
]
