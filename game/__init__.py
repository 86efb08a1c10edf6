"""
Dungeon RPG game layer.

Provides the rules built on top of the engine:
- Components (combatants, buffs, equipment; Pydantic models)
- Catalog (typed view of the static game data)
- Battle (attack resolution, buff ledger, turn engine)
- Progression (skills, rewards, level-up)
- Session (dungeon flow and player input)
- Save (snapshot persistence)
"""
