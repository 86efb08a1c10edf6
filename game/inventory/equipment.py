"""
Equipment management - buying, equipping and enhancing gear and pets.

All functions take a player and return ``(player, logs, error)``. A
non-None error means the request was refused and the player is returned
unchanged.
"""

from __future__ import annotations

from typing import Optional

from engine.core.config import EngineConfig
from game.battle.log import BattleLog, LogEntry, LogType
from game.catalog import Catalog
from game.components.character import Player
from game.components.inventory import EquipmentItem, EquipmentType
from game.errors import ActionError

EquipResult = tuple[Player, list[LogEntry], Optional[ActionError]]

SLOTS = {EquipmentType.WEAPON: "weapon", EquipmentType.ARMOR: "armor"}


def _refuse(player: Player, message: str, error: ActionError) -> EquipResult:
    log = BattleLog()
    log.add(message, LogType.FAIL)
    return player, log.entries, error


def _usable_error(player: Player, item: EquipmentItem) -> Optional[tuple[str, ActionError]]:
    if player.level < item.required_level:
        return f"Requires level {item.required_level}.", ActionError.LEVEL_TOO_LOW
    if not item.usable_by(player.job, player.level):
        return f"A {player.job.value} can't use {item.name}.", ActionError.ITEM_NOT_USABLE
    return None


def buy_item(player: Player, item_id: str, catalog: Catalog) -> EquipResult:
    """Buy a weapon or armor from the shop."""
    item = catalog.item(item_id)
    if item is None:
        return _refuse(player, "That item isn't sold here.", ActionError.UNKNOWN_ITEM)
    if player.owns(item.id):
        return _refuse(player, f"You already own {item.name}.", ActionError.ALREADY_OWNED)
    if player.gold < item.price:
        return _refuse(player, f"Not enough gold. (needs {item.price} G)", ActionError.NOT_ENOUGH_GOLD)
    problem = _usable_error(player, item)
    if problem is not None:
        return _refuse(player, *problem)

    owned = "owned_weapon_ids" if item.type == EquipmentType.WEAPON else "owned_armor_ids"
    player = player.evolve(
        gold=player.gold - item.price,
        **{owned: [*getattr(player, owned), item.id]},
    )
    log = BattleLog()
    log.add(f"Bought {item.name}!", LogType.GAIN_MONEY)
    return player, log.entries, None


def buy_pet(player: Player, pet_id: str, catalog: Catalog) -> EquipResult:
    pet = catalog.pet(pet_id)
    if pet is None:
        return _refuse(player, "That pet isn't sold here.", ActionError.UNKNOWN_ITEM)
    if pet.id in player.owned_pet_ids:
        return _refuse(player, f"You already own {pet.name}.", ActionError.ALREADY_OWNED)
    if player.gold < pet.price:
        return _refuse(player, f"Not enough gold. (needs {pet.price} G)", ActionError.NOT_ENOUGH_GOLD)

    player = player.evolve(gold=player.gold - pet.price, owned_pet_ids=[*player.owned_pet_ids, pet.id])
    log = BattleLog()
    log.add(f"Adopted {pet.name}!", LogType.GAIN_MONEY)
    return player, log.entries, None


def equip_item(player: Player, item_id: str, catalog: Catalog) -> EquipResult:
    """Equip an owned weapon or armor, replacing whatever is in that slot."""
    item = catalog.item(item_id)
    if item is None:
        return _refuse(player, "No such item.", ActionError.UNKNOWN_ITEM)
    if not player.owns(item.id):
        return _refuse(player, f"You don't own {item.name}.", ActionError.ITEM_NOT_OWNED)
    problem = _usable_error(player, item)
    if problem is not None:
        return _refuse(player, *problem)

    player = player.evolve(**{SLOTS[item.type]: item.clone()})
    log = BattleLog()
    log.add(f"Equipped {item.name}.", LogType.NORMAL)
    return player, log.entries, None


def unequip(player: Player, item_type: EquipmentType) -> EquipResult:
    slot = SLOTS[item_type]
    current: Optional[EquipmentItem] = getattr(player, slot)
    if current is None:
        return _refuse(player, f"No {slot} equipped.", ActionError.NOTHING_EQUIPPED)
    log = BattleLog()
    log.add(f"Took off {current.name}.", LogType.NORMAL)
    return player.evolve(**{slot: None}), log.entries, None


def equip_pet(player: Player, pet_id: str, catalog: Catalog) -> EquipResult:
    pet = catalog.pet(pet_id)
    if pet is None:
        return _refuse(player, "No such pet.", ActionError.UNKNOWN_ITEM)
    if pet.id not in player.owned_pet_ids:
        return _refuse(player, f"You don't own {pet.name}.", ActionError.ITEM_NOT_OWNED)
    log = BattleLog()
    log.add(f"{pet.name} joins you.", LogType.NORMAL)
    return player.evolve(pet=pet.clone()), log.entries, None


def unequip_pet(player: Player) -> EquipResult:
    if player.pet is None:
        return _refuse(player, "No pet with you.", ActionError.NOTHING_EQUIPPED)
    log = BattleLog()
    log.add(f"{player.pet.name} stays home.", LogType.NORMAL)
    return player.evolve(pet=None), log.entries, None


def enhance_cost(level: int, base_step: tuple[int, int]) -> int:
    base, step = base_step
    return base + level * step


def enhance(
    player: Player,
    target: str,
    config: Optional[EngineConfig] = None,
) -> EquipResult:
    """
    Enhance the equipped weapon, armor or pet by one level.

    Weapon/armor levels add a flat stat step each; pet levels add to the
    pet's power. Costs grow linearly with the current level.

    Args:
        player: The player paying
        target: "weapon", "armor" or "pet"
        config: Balance constants
    """
    if target not in ("weapon", "armor", "pet"):
        return _refuse(player, f"There is no {target} slot to enhance.", ActionError.UNKNOWN_ITEM)
    config = config or EngineConfig()
    equipped = getattr(player, target)
    if equipped is None:
        return _refuse(player, f"Equip a {target} first.", ActionError.NOTHING_EQUIPPED)

    level = player.enhance_level(equipped.id)
    costs = config.pet_enhance_cost if target == "pet" else config.equipment_enhance_cost
    cost = enhance_cost(level, costs)
    if player.gold < cost:
        return _refuse(player, f"Not enough gold. (needs {cost} G)", ActionError.NOT_ENOUGH_GOLD)

    player = player.evolve(
        gold=player.gold - cost,
        enhance_levels={**player.enhance_levels, equipped.id: level + 1},
    )
    log = BattleLog()
    log.add(f"{equipped.name} enhanced to +{level + 1}!", LogType.VICTORY)
    return player, log.entries, None
