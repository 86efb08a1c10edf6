"""
Reason codes for rejected player requests.

Rejections are ordinary results, not exceptions: the request is ignored,
state is left untouched and a ``fail`` log line explains why.
"""

from __future__ import annotations

from enum import Enum


class ActionError(str, Enum):
    # Turn engine
    BUSY = "busy"
    NO_ACTIVE_BATTLE = "no_active_battle"
    NOT_PLAYER_TURN = "not_player_turn"
    BATTLE_IN_PROGRESS = "battle_in_progress"
    NO_RECOVERY_CHARGES = "no_recovery_charges"

    # Skills
    UNKNOWN_SKILL = "unknown_skill"
    SKILL_NOT_LEARNED = "skill_not_learned"
    SKILL_ON_COOLDOWN = "skill_on_cooldown"
    LEVEL_TOO_LOW = "level_too_low"
    JOB_NOT_ALLOWED = "job_not_allowed"
    NO_SKILL_POINTS = "no_skill_points"
    SKILL_MAX_LEVEL = "skill_max_level"

    # Dungeons
    UNKNOWN_DUNGEON = "unknown_dungeon"
    NOT_IN_DUNGEON = "not_in_dungeon"
    BOSS_ON_COOLDOWN = "boss_on_cooldown"

    # Items
    UNKNOWN_ITEM = "unknown_item"
    ITEM_NOT_OWNED = "item_not_owned"
    ITEM_NOT_USABLE = "item_not_usable"
    NO_PENDING_LOOT = "no_pending_loot"
    LOOT_PENDING = "loot_pending"
    NOTHING_EQUIPPED = "nothing_equipped"
    ALREADY_OWNED = "already_owned"

    # Gold
    NOT_ENOUGH_GOLD = "not_enough_gold"
