import pytest
import json
from pathlib import Path
from engine.resources.database import CATEGORIES, Database

@pytest.fixture
def mock_db_path(tmp_path):
    # Setup mock directory structure in tmp_path
    schemas = tmp_path / "schemas"
    schemas.mkdir()

    database = tmp_path / "database"
    database.mkdir()
    (database / "skills").mkdir()

    # Create valid schema
    skill_schema = {
        "type": "object",
        "required": ["id", "cooldown"],
        "properties": {
            "id": {"type": "string"},
            "cooldown": {"type": "integer"}
        }
    }
    with open(schemas / "skill.schema.json", "w") as f:
        json.dump(skill_schema, f)

    return tmp_path

def test_load_all(mock_db_path):
    # Create valid skill
    skill_data = [
        {"id": "fireball", "cooldown": 1}
    ]
    with open(mock_db_path / "database" / "skills" / "mage.json", "w") as f:
        json.dump(skill_data, f)

    db = Database(mock_db_path)
    db.load_all()

    assert "fireball" in db.skills
    assert db.skills["fireball"]["cooldown"] == 1
    assert db.get("skills", "fireball") is db.skills["fireball"]

def test_validation_error(mock_db_path):
    # Create invalid skill (missing cooldown)
    skill_data = [
        {"id": "broken"},
        {"id": "fine", "cooldown": 2}
    ]
    with open(mock_db_path / "database" / "skills" / "broken.json", "w") as f:
        json.dump(skill_data, f)

    db = Database(mock_db_path)
    db.load_all()

    assert "broken" not in db.skills # Should be skipped due to validation error
    assert "fine" in db.skills

def test_single_record_file(mock_db_path):
    with open(mock_db_path / "database" / "skills" / "one.json", "w") as f:
        json.dump({"id": "slash", "cooldown": 3}, f)

    db = Database(mock_db_path)
    db.load_all()

    assert "slash" in db.skills

def test_malformed_json_skipped(mock_db_path):
    (mock_db_path / "database" / "skills" / "bad.json").write_text("{not json", encoding="utf-8")
    with open(mock_db_path / "database" / "skills" / "good.json", "w") as f:
        json.dump([{"id": "fireball", "cooldown": 1}], f)

    db = Database(mock_db_path)
    db.load_all()

    assert list(db.skills) == ["fireball"]

def test_missing_schema(mock_db_path):
    # Create skill but delete schema
    skill_data = [{"id": "fireball", "cooldown": 1}]
    with open(mock_db_path / "database" / "skills" / "mage.json", "w") as f:
        json.dump(skill_data, f)

    (mock_db_path / "schemas" / "skill.schema.json").unlink()

    db = Database(mock_db_path)
    db.load_all()

    # Without a schema the category is not loaded at all
    assert "fireball" not in db.skills

def test_missing_categories_are_empty(mock_db_path):
    db = Database(mock_db_path)
    db.load_all()

    for name in CATEGORIES:
        assert db.category(name) == {}
    with pytest.raises(KeyError):
        db.category("spells")

def test_packaged_data_is_valid():
    data_path = Path(__file__).parents[3] / "game" / "data"
    db = Database(data_path)
    db.load_all()

    assert len(db.jobs) == 3
    assert "fireball" in db.skills
    assert "boss_5" in db.bosses
    assert "w_starter_club" in db.equipment
