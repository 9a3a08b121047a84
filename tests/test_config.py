"""Tests for configuration loading."""

from keeper.config import DATA_DIR, Config, load_config
from keeper.core.tasks import TaskCategory, TaskPriority


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "nope.conf")
        assert config == Config()

    def test_parses_values(self, tmp_path):
        path = tmp_path / "keeper.conf"
        path.write_text(
            "# Keeper settings\n"
            'TASKS_FILE="~/tasks.json" # where tasks live\n'
            "DEFAULT_CATEGORY='Office Work'\n"
            "DEFAULT_PRIORITY=High\n"
            "UPCOMING_COUNT=8  # preview length\n"
            "\n"
            "not a setting\n"
        )
        config = load_config(path)
        assert config.tasks_file == "~/tasks.json"
        assert config.default_category is TaskCategory.OFFICE
        assert config.default_priority is TaskPriority.HIGH
        assert config.upcoming_count == 8

    def test_invalid_values_keep_defaults(self, tmp_path, caplog):
        path = tmp_path / "keeper.conf"
        path.write_text("DEFAULT_CATEGORY=Laundry\nDEFAULT_PRIORITY=urgent\nUPCOMING_COUNT=many\n")
        config = load_config(path)
        assert config.default_category is TaskCategory.HOUSE
        assert config.default_priority is TaskPriority.MEDIUM
        assert config.upcoming_count == 5
        assert "Laundry" in caplog.text

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "keeper.conf"
        path.write_text("SOMETHING_ELSE=1\n")
        assert load_config(path) == Config()


class TestTasksPath:
    def test_default(self):
        assert Config().tasks_path == DATA_DIR / "tasks.json"

    def test_configured(self, tmp_path):
        config = Config(tasks_file=str(tmp_path / "mine.json"))
        assert config.tasks_path == tmp_path / "mine.json"
