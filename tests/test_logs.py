"""Tests for logging setup."""

import logging

from projecthub.logs import get_logger, setup_logging


class TestLogging:

    def test_get_logger_namespaces_under_package(self):
        assert get_logger("api").name == "projecthub.api"
        assert get_logger("projecthub.application").name == "projecthub.application"
        assert get_logger().name == "projecthub"

    def test_console_level_from_argument(self):
        logger = setup_logging(level="warning", log_dir="", debug=False)
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.WARNING
        assert logger.propagate is False

    def test_debug_overrides_level(self):
        logger = setup_logging(level="ERROR", log_dir="", debug=True)
        assert logger.handlers[0].level == logging.DEBUG

    def test_file_handler_when_dir_given(self, tmp_path):
        logger = setup_logging(level="INFO", log_dir=str(tmp_path / "logs"), debug=False)
        try:
            assert len(logger.handlers) == 2
            get_logger("tests").info("hello")
            for handler in logger.handlers:
                handler.flush()
            assert "hello" in (tmp_path / "logs" / "projecthub.log").read_text()
        finally:
            for handler in logger.handlers:
                handler.close()
            logger.handlers.clear()
