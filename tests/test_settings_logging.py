"""Tests for environment settings and logging setup."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from blockpress.errors import ConfigurationError
from blockpress.logging_setup import LOGGER_NAME, configure_logging
from blockpress.settings import Settings, _env_bool, _env_int, _env_path


class TestEnvHelpers:
    """Tests for the environment readers."""

    @pytest.mark.parametrize("raw", ["1", "true", "YES", " on "])
    def test_bool_true(self, monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
        """Truthy spellings read as True."""
        monkeypatch.setenv("BLOCKPRESS_TEST_FLAG", raw)

        assert _env_bool("BLOCKPRESS_TEST_FLAG") is True

    @pytest.mark.parametrize("raw", ["0", "false", "No", "off"])
    def test_bool_false(self, monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
        """Falsy spellings read as False."""
        monkeypatch.setenv("BLOCKPRESS_TEST_FLAG", raw)

        assert _env_bool("BLOCKPRESS_TEST_FLAG", True) is False

    def test_bool_unrecognized_uses_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Unknown values and unset variables fall back to the default."""
        monkeypatch.setenv("BLOCKPRESS_TEST_FLAG", "maybe")
        assert _env_bool("BLOCKPRESS_TEST_FLAG", True) is True

        monkeypatch.delenv("BLOCKPRESS_TEST_FLAG")
        assert _env_bool("BLOCKPRESS_TEST_FLAG") is False

    def test_int(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Integers are parsed and clamped to the minimum."""
        monkeypatch.setenv("BLOCKPRESS_TEST_INT", "12")
        assert _env_int("BLOCKPRESS_TEST_INT", 1) == 12
        assert _env_int("BLOCKPRESS_TEST_INT", 1, min_val=50) == 50

        monkeypatch.delenv("BLOCKPRESS_TEST_INT")
        assert _env_int("BLOCKPRESS_TEST_INT", 7) == 7

    def test_int_invalid(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Non-integers are configuration errors."""
        monkeypatch.setenv("BLOCKPRESS_TEST_INT", "lots")

        with pytest.raises(ConfigurationError) as exc_info:
            _env_int("BLOCKPRESS_TEST_INT", 1)

        assert exc_info.value.to_dict()["setting"] == "BLOCKPRESS_TEST_INT"

    def test_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Empty paths read as None."""
        monkeypatch.setenv("BLOCKPRESS_TEST_PATH", "")
        assert _env_path("BLOCKPRESS_TEST_PATH") is None

        monkeypatch.setenv("BLOCKPRESS_TEST_PATH", "/tmp/blockpress.log")
        assert _env_path("BLOCKPRESS_TEST_PATH") == Path("/tmp/blockpress.log")


class TestConfigureLogging:
    """Tests for configure_logging."""

    @pytest.fixture(autouse=True)
    def _reset_logger(self):
        yield
        logger = logging.getLogger(LOGGER_NAME)
        for handler in list(logger.handlers):
            if getattr(handler, "_blockpress", False):
                logger.removeHandler(handler)
                handler.close()
        logger.setLevel(logging.NOTSET)

    def test_stream_handler(self) -> None:
        """Without a log path only a stream handler is installed."""
        logger = configure_logging(Settings(log_level="debug", log_path=None))

        owned = [h for h in logger.handlers if getattr(h, "_blockpress", False)]
        assert logger.name == LOGGER_NAME
        assert logger.level == logging.DEBUG
        assert len(owned) == 1
        assert not isinstance(owned[0], RotatingFileHandler)

    def test_idempotent(self) -> None:
        """Repeated calls replace handlers rather than adding more."""
        config = Settings(log_path=None)
        configure_logging(config)
        logger = configure_logging(config)

        assert len([h for h in logger.handlers if getattr(h, "_blockpress", False)]) == 1

    def test_rotating_file(self, tmp_path: Path) -> None:
        """A log path adds a rotating file handler."""
        log_path = tmp_path / "logs" / "blockpress.log"
        logger = configure_logging(
            Settings(log_path=log_path, log_max_bytes=4096, log_backup_count=2),
        )

        file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].maxBytes == 4096
        assert file_handlers[0].backupCount == 2

        logging.getLogger("blockpress.editor.session").warning("hello file")
        file_handlers[0].flush()

        assert "hello file" in log_path.read_text(encoding="utf-8")
