"""
Pet actions at the start of the player's turn.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from engine.core.config import EngineConfig
from game.battle.actor import effective_stats
from game.battle.log import BattleLog, LogEntry, LogType
from game.components.character import Combatant, Player
from game.components.inventory import PetKind


@dataclass
class PetTurnResult:
    player: Player
    opponent: Combatant
    logs: list[LogEntry] = field(default_factory=list)


def pet_power(player: Player, config: EngineConfig) -> float:
    """Pet power including its enhancement bonus."""
    if player.pet is None:
        return 0.0
    return player.pet.power + player.enhance_level(player.pet.id) * config.pet_enhance_step


def apply_pet_start_of_turn(
    player: Player,
    opponent: Combatant,
    config: Optional[EngineConfig] = None,
) -> PetTurnResult:
    """
    Let the equipped pet act.

    Attack pets hit the opponent for a share of the player's effective
    ATK (at least 1); heal pets restore a share of max HP, capped.
    """
    config = config or EngineConfig()
    log = BattleLog()
    pet = player.pet
    if pet is None:
        return PetTurnResult(player=player, opponent=opponent)

    power = pet_power(player, config)

    if pet.kind == PetKind.ATTACK:
        damage = max(1, math.floor(effective_stats(player, config).atk * power))
        opponent = opponent.damaged(damage)
        log.add(
            f"{pet.name} attacks! {damage} damage (enemy HP: {opponent.hp})",
            LogType.ATTACK,
        )
    elif pet.kind == PetKind.HEAL:
        heal = max(1, math.floor(player.max_hp * power))
        healed = player.healed(heal)
        if healed.hp != player.hp:
            log.add(f"{pet.name} heals you! HP +{healed.hp - player.hp}", LogType.NORMAL)
        player = healed

    return PetTurnResult(player=player, opponent=opponent, logs=log.entries)
