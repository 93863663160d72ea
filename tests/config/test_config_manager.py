import logging

from aether_builder.config import ConfigManager
from aether_builder.config.manager import _get_user_config_dir


def test_singleton():
    assert ConfigManager() is ConfigManager()


def test_packaged_sections_loaded(config):
    assert "button" in config.get_element_defaults()["kinds"]
    assert len(config.get_blocks()["blocks"]) == 6
    editor = config.get_editor_config()
    assert editor["devices"] == {"desktop": "100%", "tablet": "768px", "mobile": "375px"}
    assert editor["verify_integrity"] is False
    assert config.get_logging_config()["version"] == 1


def test_user_dir_from_environment(isolated_config):
    assert _get_user_config_dir() == isolated_config


def test_user_dir_default(monkeypatch, tmp_path):
    monkeypatch.delenv("AETHER_CONFIG_DIR", raising=False)
    monkeypatch.setattr("os.name", "posix")
    monkeypatch.setenv("HOME", str(tmp_path))
    assert _get_user_config_dir() == tmp_path / ".aether_builder"


def test_user_override_replaces_top_level_key(isolated_config):
    (isolated_config / "editor.yml").write_text(
        "devices:\n  desktop: 1280px\n",
        encoding="utf-8",
    )
    config = ConfigManager()
    config.reload()
    editor = config.get_editor_config()
    assert editor["devices"] == {"desktop": "1280px"}
    assert editor["root"]["name"] == "Body"


def test_invalid_user_yaml_is_ignored(isolated_config, caplog):
    (isolated_config / "blocks.yml").write_text("blocks: [unclosed\n", encoding="utf-8")
    with caplog.at_level(logging.ERROR):
        config = ConfigManager()
        config.reload()
    assert len(config.get_blocks()["blocks"]) == 6
    assert any("Could not parse user config" in r.getMessage() for r in caplog.records)


def test_non_mapping_user_file_is_ignored(isolated_config):
    (isolated_config / "editor.yml").write_text("- just\n- a list\n", encoding="utf-8")
    config = ConfigManager()
    config.reload()
    assert config.get_editor_config()["root"]["name"] == "Body"


def test_reload_picks_up_new_files(isolated_config):
    config = ConfigManager()
    assert config.get_editor_config()["verify_integrity"] is False
    (isolated_config / "editor.yml").write_text("verify_integrity: true\n", encoding="utf-8")
    assert config.get_editor_config()["verify_integrity"] is False
    config.reload()
    assert config.get_editor_config()["verify_integrity"] is True
