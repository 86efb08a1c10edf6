"""
Game Database.

Handles loading and validation of static game data (skills, monsters,
equipment, pets, dungeons, bosses, jobs). Every record is validated
against its category schema; records that fail are logged and skipped.
"""

import json
import logging
from pathlib import Path
from typing import Any

import jsonschema

# category folder -> schema file
CATEGORIES: dict[str, str] = {
    "skills": "skill.schema.json",
    "monsters": "monster_tier.schema.json",
    "equipment": "equipment.schema.json",
    "pets": "pet.schema.json",
    "dungeons": "dungeon.schema.json",
    "bosses": "boss.schema.json",
    "jobs": "job.schema.json",
}


class Database:
    """
    Central storage for static game data.

    Records are plain dicts keyed by their ``id``; typed views are built
    on top by the game layer. The database never mutates loaded data
    after ``load_all``.
    """

    def __init__(self, data_path: Path | str):
        self._data_path = Path(data_path)
        self._schemas: dict[str, Any] = {}
        self._categories: dict[str, dict[str, Any]] = {name: {} for name in CATEGORIES}

        self.logger = logging.getLogger(__name__)

    @property
    def data_path(self) -> Path:
        return self._data_path

    def load_all(self) -> None:
        """Load all data from disk."""
        self._load_schemas()

        for folder, schema_name in CATEGORIES.items():
            self._categories[folder] = self._load_category(folder, schema_name)

        summary = ", ".join(f"{len(records)} {name}" for name, records in self._categories.items())
        self.logger.info(f"Loaded {summary}.")

    def category(self, name: str) -> dict[str, Any]:
        """All records of a category, keyed by id."""
        if name not in self._categories:
            raise KeyError(f"Unknown data category: {name}")
        return self._categories[name]

    def get(self, category: str, record_id: str) -> dict[str, Any] | None:
        return self.category(category).get(record_id)

    @property
    def skills(self) -> dict[str, Any]:
        return self._categories["skills"]

    @property
    def monsters(self) -> dict[str, Any]:
        return self._categories["monsters"]

    @property
    def equipment(self) -> dict[str, Any]:
        return self._categories["equipment"]

    @property
    def pets(self) -> dict[str, Any]:
        return self._categories["pets"]

    @property
    def dungeons(self) -> dict[str, Any]:
        return self._categories["dungeons"]

    @property
    def bosses(self) -> dict[str, Any]:
        return self._categories["bosses"]

    @property
    def jobs(self) -> dict[str, Any]:
        return self._categories["jobs"]

    def _load_schemas(self) -> None:
        """Load JSON schemas."""
        schema_dir = self._data_path / "schemas"
        if not schema_dir.exists():
            self.logger.warning(f"Schema directory not found: {schema_dir}")
            return

        for schema_file in schema_dir.glob("*.schema.json"):
            try:
                with open(schema_file, 'r', encoding='utf-8') as f:
                    self._schemas[schema_file.name] = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                self.logger.error(f"Failed to load schema {schema_file}: {e}")

    def _load_category(self, folder: str, schema_name: str) -> dict[str, Any]:
        """Load all JSON files in a category folder."""
        category_dir = self._data_path / "database" / folder
        data_store: dict[str, Any] = {}

        if not category_dir.exists():
            self.logger.warning(f"Data directory not found: {category_dir}")
            return data_store

        schema = self._schemas.get(schema_name)
        if schema is None:
            self.logger.warning(f"No schema found for {folder} ({schema_name})")
            return data_store

        for file_path in sorted(category_dir.glob("*.json")):
            try:
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                self.logger.error(f"Failed to load {file_path}: {e}")
                continue

            records = data if isinstance(data, list) else [data]
            for record in records:
                try:
                    jsonschema.validate(instance=record, schema=schema)
                except jsonschema.ValidationError as e:
                    self.logger.error(f"Validation error in {file_path}: {e.message}")
                    continue
                if record["id"] in data_store:
                    self.logger.warning(f"Duplicate {folder} id '{record['id']}' in {file_path}")
                data_store[record["id"]] = record

        return data_store
