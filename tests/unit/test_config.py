"""
Unit tests for config/ - settings and logging setup
"""
import logging

import pytest

from config.logging_config import get_logger, setup_logger
from config.settings import Settings, get_settings


class TestSettings:
    """pydantic-settings configuration"""

    def test_defaults(self):
        settings = Settings()
        assert settings.default_page_size == "A4"
        assert settings.brand_title == "WORKLEDGER"
        assert settings.include_page_numbers is True

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("WORKLEDGER_DEFAULT_PAGE_SIZE", "Letter")
        monkeypatch.setenv("WORKLEDGER_INCLUDE_REPORT_HEADER", "false")
        monkeypatch.setenv("WORKLEDGER_IMAGE_MAX_BYTES", "2048")
        settings = Settings()
        assert settings.default_page_size == "Letter"
        assert settings.include_report_header is False
        assert settings.image_max_bytes == 2048

    def test_page_defaults(self):
        settings = Settings(default_orientation="landscape", default_margin=15)
        assert settings.page_defaults() == {
            "size": "A4",
            "orientation": "landscape",
            "margins": {"top": 15, "bottom": 15, "left": 15, "right": 15},
        }

    def test_ensure_dirs(self, tmp_path):
        settings = Settings(output_dir=tmp_path / "a" / "out", logs_dir=tmp_path / "b" / "logs")
        settings.ensure_dirs()
        assert (tmp_path / "a" / "out").is_dir()
        assert (tmp_path / "b" / "logs").is_dir()

    def test_get_settings_cached(self):
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()


class TestLogging:
    """Central logger setup"""

    @pytest.fixture
    def logger_name(self, request):
        name = f"workledger-test.{request.node.name}"
        yield name
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

    def test_console_and_file_handlers(self, tmp_path, logger_name):
        log_file = tmp_path / "logs" / "test.log"
        logger = setup_logger(logger_name, log_file=str(log_file))

        kinds = sorted(type(h).__name__ for h in logger.handlers)
        assert kinds == ["RotatingFileHandler", "StreamHandler"]

        logger.info("written to the log file")
        for handler in logger.handlers:
            handler.flush()
        assert "written to the log file" in log_file.read_text(encoding="utf-8")

    def test_handlers_added_once(self, tmp_path, logger_name):
        log_file = str(tmp_path / "test.log")
        first = setup_logger(logger_name, log_file=log_file)
        second = get_logger(logger_name)
        assert first is second
        assert len(second.handlers) == 2
