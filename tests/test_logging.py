"""
Tests for logging setup and level resolution.
"""

import logging

import pytest

from remembrances_installer.core.observability.logging_config import (
    resolve_level,
    setup_logging,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for h in root.handlers:
        if h not in handlers:
            h.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestResolveLevel:
    def test_default(self):
        assert resolve_level(env={}) == "WARNING"

    def test_env(self):
        assert resolve_level(env={"REMEMBRANCES_LOG_LEVEL": "INFO"}) == "INFO"

    def test_flags_beat_env(self):
        env = {"REMEMBRANCES_LOG_LEVEL": "ERROR"}
        assert resolve_level(verbose=True, env=env) == "INFO"
        assert resolve_level(debug=True, verbose=True, env=env) == "DEBUG"
        assert resolve_level(quiet=True, env={}) == "ERROR"


class TestSetupLogging:
    def test_console_level(self, restore_root_logger):
        setup_logging("INFO")
        assert restore_root_logger.level == logging.INFO
        assert len(restore_root_logger.handlers) == 1

    def test_bad_level_falls_back(self, restore_root_logger):
        setup_logging("LOUD")
        assert restore_root_logger.level == logging.WARNING

    def test_file_handler(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "install.log"
        setup_logging("WARNING", log_file=str(log_file), log_file_level="DEBUG")
        assert restore_root_logger.level == logging.DEBUG
        logging.getLogger("remembrances_installer.test").debug("probe detail")
        for h in restore_root_logger.handlers:
            h.flush()
        assert "probe detail" in log_file.read_text()

    def test_warning_marker(self, restore_root_logger, capsys):
        setup_logging("WARNING")
        logging.getLogger("remembrances_installer.test").warning("CUDA version unknown")
        assert "! CUDA version unknown" in capsys.readouterr().err
