import logging

from engine.core.config import EngineConfig


def test_defaults():
    config = EngineConfig()
    assert config.recovery_charges == 5
    assert config.recovery_percent == 0.6
    assert config.rest_percent == 0.4
    assert config.miss_streak_for_bonus == 3
    assert config.boss_cooldown_seconds == 3600
    assert config.log_level == logging.INFO


def test_override_by_keyword():
    config = EngineConfig(recovery_charges=2, scarecrow_hp=30)
    assert config.recovery_charges == 2
    assert config.scarecrow_hp == 30
    # Untouched values keep their defaults
    assert config.escape_chance == 50
