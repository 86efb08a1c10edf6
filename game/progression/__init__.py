"""
Progression module - skills, rewards, level-up.

Provides:
- Skill learning and upgrades
- Skill effect interpretation
- Victory rewards and level-up
- Defeat penalty
- Loot drops and loot decisions
"""

from game.progression.rewards import (
    LootDecision,
    LootDrop,
    VictoryRewards,
    apply_defeat,
    check_level_up,
    resolve_loot,
    resolve_victory,
    roll_loot,
)
from game.progression.skills import (
    LearnResult,
    SkillOutcome,
    build_buff,
    check_learnable,
    check_usable,
    learn_skill,
    use_skill,
)

__all__ = [
    # Rewards
    "LootDecision",
    "LootDrop",
    "VictoryRewards",
    "apply_defeat",
    "check_level_up",
    "resolve_loot",
    "resolve_victory",
    "roll_loot",
    # Skills
    "LearnResult",
    "SkillOutcome",
    "build_buff",
    "check_learnable",
    "check_usable",
    "learn_skill",
    "use_skill",
]
