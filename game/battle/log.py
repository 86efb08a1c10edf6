"""
Battle log records.

Every engine operation returns an ordered list of ``LogEntry``. The
category values are consumed verbatim by presentation code for styling
and must not be renamed.
"""

from __future__ import annotations

from enum import Enum

from engine.core.component import Component


class LogType(str, Enum):
    NORMAL = "normal"
    ATTACK = "atk"
    CRITICAL = "cri"
    VICTORY = "vic"
    DEFEAT = "def"
    LEVEL_UP = "lvup"
    FAIL = "fail"
    APPEAR = "appear"
    GAIN_EXP = "gainExp"
    GAIN_MONEY = "gainMoney"
    TRY_TO_ATTACK = "tryToAtk"


class LogEntry(Component):
    message: str
    type: LogType = LogType.NORMAL


class BattleLog:
    """
    Append-only builder for a sequence of log entries.

    Usage:
        log = BattleLog()
        log.add("Slime appears!", LogType.APPEAR)
        log.extend(result.logs)
        return log.entries
    """

    def __init__(self):
        self._entries: list[LogEntry] = []

    def add(self, message: str, log_type: LogType = LogType.NORMAL) -> None:
        self._entries.append(LogEntry(message=message, type=log_type))

    def extend(self, entries: list[LogEntry]) -> None:
        self._entries.extend(entries)

    @property
    def entries(self) -> list[LogEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
