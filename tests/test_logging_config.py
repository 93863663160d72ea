import logging

import pytest

from aether_builder import logging_config
from aether_builder.config import ConfigManager
from aether_builder.logging_config import setup_logging


@pytest.fixture
def restore_logging():
    """Put the root logger back the way the test session configured it."""
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    touched = list(logging_config._MOVEMENT_LOGGERS) + ["aether_builder.custom"]
    saved = {name: (logging.getLogger(name).level, list(logging.getLogger(name).handlers)) for name in touched}
    yield
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers = saved_handlers
    root.setLevel(saved_level)
    for name, (level, handlers) in saved.items():
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.handlers = handlers


def test_setup_writes_to_log_dir(tmp_path, monkeypatch, restore_logging):
    log_dir = tmp_path / "logs"
    monkeypatch.setenv("AETHER_LOG_DIR", str(log_dir))

    setup_logging()
    logging.getLogger("aether_builder.test").warning("hello from test")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert log_dir.is_dir()
    assert "hello from test" in (log_dir / "app.log").read_text(encoding="utf-8")
    # The cached section is left unchanged.
    assert ConfigManager().get_logging_config()["handlers"]["file"]["filename"] == "logs/app.log"


def test_missing_schema_falls_back_to_console(tmp_path, monkeypatch, isolated_config, restore_logging):
    monkeypatch.setenv("AETHER_LOG_DIR", str(tmp_path / "logs"))
    (isolated_config / "logging.yml").write_text("version: 0\n", encoding="utf-8")
    ConfigManager().reload()

    setup_logging()

    handlers = logging.getLogger().handlers
    assert handlers
    assert not any(isinstance(h, logging.FileHandler) for h in handlers)
    assert not (tmp_path / "logs" / "app.log").exists()


def test_debug_overrides(tmp_path, monkeypatch, restore_logging):
    monkeypatch.setenv("AETHER_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("AETHER_DEBUG_MOVEMENT", "true")
    monkeypatch.setenv("AETHER_DEBUG_MODULES", "aether_builder.custom, ")

    setup_logging()

    for name in list(logging_config._MOVEMENT_LOGGERS) + ["aether_builder.custom"]:
        assert logging.getLogger(name).level == logging.DEBUG
