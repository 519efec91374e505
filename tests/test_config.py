import json

from file_explorer.config import MAX_RECENT_FILES, AppConfig, config_path


def test_missing_file_gives_defaults(tmp_path):
    config = AppConfig.load(tmp_path / "missing.json")
    assert config.theme == "default"
    assert config.recent_files == []
    assert config.max_recent_files == MAX_RECENT_FILES


def test_save_and_load(tmp_path):
    path = tmp_path / "nested" / "config.json"
    AppConfig(theme="dark", recent_files=["/a", "/b"], max_recent_files=5).save(path)

    loaded = AppConfig.load(path)
    assert loaded.theme == "dark"
    assert loaded.recent_files == ["/a", "/b"]
    assert loaded.max_recent_files == 5


def test_unknown_keys_are_ignored(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"theme": "light", "colour": "blue"}))
    assert AppConfig.load(path).theme == "light"


def test_malformed_file_gives_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    assert AppConfig.load(path) == AppConfig()

    path.write_text("[1, 2]")
    assert AppConfig.load(path) == AppConfig()


def test_config_path_env_override(tmp_path, monkeypatch):
    target = tmp_path / "custom.json"
    monkeypatch.setenv("FILE_EXPLORER_CONFIG", str(target))
    assert config_path() == target

    AppConfig(theme="light").save()
    assert AppConfig.load().theme == "light"


def test_wrongly_typed_values_fall_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "theme": "dark",
                "max_recent_files": "10",
                "recent_files": "/etc/passwd",
                "log_level": 20,
                "start_directory": ["/"],
            }
        )
    )

    config = AppConfig.load(path)
    assert config.theme == "dark"
    assert config.max_recent_files == MAX_RECENT_FILES
    assert config.recent_files == []
    assert config.log_level == AppConfig().log_level
    assert config.start_directory is None


def test_invalid_recent_entries_and_limits_are_dropped(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"recent_files": ["/a", 3], "max_recent_files": 0}))
    config = AppConfig.load(path)
    assert config.recent_files == []
    assert config.max_recent_files == MAX_RECENT_FILES

    path.write_text(json.dumps({"max_recent_files": True}))
    assert AppConfig.load(path).max_recent_files == MAX_RECENT_FILES
