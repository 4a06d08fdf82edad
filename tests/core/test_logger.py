"""Tests for logger configuration."""

import sys

from loguru import logger

from telebox.config.schema import LoggingConfig, Settings
from telebox.core.logger import configure_logger


def test_file_sink_receives_records(tmp_path):
    log_file = tmp_path / "logs" / "telebox.log"
    settings = Settings(logging=LoggingConfig(level="DEBUG", file_enabled=True, file_path=str(log_file)))

    configure_logger(settings)
    logger.info("reload finished")
    logger.complete()

    assert "reload finished" in log_file.read_text()
    logger.remove()
    logger.add(sys.stderr)
