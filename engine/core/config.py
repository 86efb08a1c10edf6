"""
Engine configuration.

Balance constants for battle, rewards and progression. Defaults match the
shipped game data; tests and mods override individual values by keyword.
"""

from __future__ import annotations

import logging


class EngineConfig:
    """Configuration for the battle engine."""

    def __init__(
        self,
        # In-battle recovery
        recovery_charges: int = 5,
        recovery_percent: float = 0.6,
        rest_percent: float = 0.4,
        # Turn order and escape
        player_first_chance: int = 50,
        escape_chance: int = 50,
        escape_luck_ratio: int = 2,
        boss_skill_chance: int = 50,
        # Misses before the next basic attack is guaranteed
        miss_streak_for_bonus: int = 3,
        # Rewards (random range, per opponent level)
        monster_exp_range: tuple[int, int] = (5, 30),
        monster_exp_per_level: int = 60,
        monster_gold_range: tuple[int, int] = (10, 50),
        monster_gold_per_level: int = 30,
        boss_exp_range: tuple[int, int] = (100, 300),
        boss_exp_per_level: int = 200,
        boss_gold_range: tuple[int, int] = (200, 500),
        boss_gold_per_level: int = 100,
        monster_drop_chance: int = 5,
        boss_drop_chance: int = 30,
        sell_ratio: float = 0.5,
        defeat_exp_ratio: float = 0.7,
        # Named monsters
        named_monster_interval: int = 5,
        named_hp_multiplier: float = 1.5,
        named_stat_multiplier: float = 1.2,
        # Level growth: stat = level * growth * job modifier * (1 + job bonus%)
        hp_growth: tuple[int, int] = (50, 10),
        atk_growth: int = 30,
        def_growth: int = 40,
        luk_growth: int = 10,
        goal_exp_growth: tuple[int, int] = (30, 120),
        # Equipment and pets
        enhance_stat_step: int = 5,
        pet_enhance_step: float = 0.05,
        # Enhancement cost = base + level * step
        equipment_enhance_cost: tuple[int, int] = (150, 150),
        pet_enhance_cost: tuple[int, int] = (100, 100),
        skill_max_level: int = 5,
        boss_cooldown_seconds: int = 3600,
        # Scarecrow practice dummy
        scarecrow_hp: int = 999_999,
        # Saves
        recent_log_size: int = 50,
        log_level: int | str = logging.INFO,
    ):
        self.recovery_charges = recovery_charges
        self.recovery_percent = recovery_percent
        self.rest_percent = rest_percent
        self.player_first_chance = player_first_chance
        self.escape_chance = escape_chance
        self.escape_luck_ratio = escape_luck_ratio
        self.boss_skill_chance = boss_skill_chance
        self.miss_streak_for_bonus = miss_streak_for_bonus
        self.monster_exp_range = monster_exp_range
        self.monster_exp_per_level = monster_exp_per_level
        self.monster_gold_range = monster_gold_range
        self.monster_gold_per_level = monster_gold_per_level
        self.boss_exp_range = boss_exp_range
        self.boss_exp_per_level = boss_exp_per_level
        self.boss_gold_range = boss_gold_range
        self.boss_gold_per_level = boss_gold_per_level
        self.monster_drop_chance = monster_drop_chance
        self.boss_drop_chance = boss_drop_chance
        self.sell_ratio = sell_ratio
        self.defeat_exp_ratio = defeat_exp_ratio
        self.named_monster_interval = named_monster_interval
        self.named_hp_multiplier = named_hp_multiplier
        self.named_stat_multiplier = named_stat_multiplier
        self.hp_growth = hp_growth
        self.atk_growth = atk_growth
        self.def_growth = def_growth
        self.luk_growth = luk_growth
        self.goal_exp_growth = goal_exp_growth
        self.enhance_stat_step = enhance_stat_step
        self.pet_enhance_step = pet_enhance_step
        self.equipment_enhance_cost = equipment_enhance_cost
        self.pet_enhance_cost = pet_enhance_cost
        self.skill_max_level = skill_max_level
        self.boss_cooldown_seconds = boss_cooldown_seconds
        self.scarecrow_hp = scarecrow_hp
        self.recent_log_size = recent_log_size
        self.log_level = log_level

    def configure_logging(self) -> None:
        """Route engine diagnostics to the root handler at ``log_level``."""
        logging.basicConfig(
            level=self.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
