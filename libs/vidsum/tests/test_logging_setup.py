from __future__ import annotations

import logging
from pathlib import Path

import pytest

from vidsum.utils.logging_setup import log_file_path, setup_logging


@pytest.fixture()
def vidsum_logger():
    logger = logging.getLogger("vidsum")
    pipeline_logger = logging.getLogger("vidsum.pipeline")
    saved = (list(logger.handlers), logger.level, logger.propagate, pipeline_logger.level)
    if hasattr(logger, "_vidsum_configured"):
        delattr(logger, "_vidsum_configured")
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers, logger.level, logger.propagate, pipeline_level = saved
    pipeline_logger.setLevel(pipeline_level)
    if hasattr(logger, "_vidsum_configured"):
        delattr(logger, "_vidsum_configured")


def test_setup_logging_configures_vidsum_tree_once(settings, vidsum_logger) -> None:
    settings.logging.level = "debug"
    setup_logging(settings)

    assert vidsum_logger.level == logging.DEBUG
    assert vidsum_logger.propagate is False
    assert len(vidsum_logger.handlers) == 2
    assert logging.getLogger("httpx").level >= logging.WARNING
    assert (Path(settings.log_dir) / "vidsum.log").exists()

    setup_logging(settings)
    assert len(vidsum_logger.handlers) == 2


def test_default_log_file_is_vidsum_log_under_log_dir(settings) -> None:
    assert log_file_path(settings) == Path(settings.log_dir) / "vidsum.log"

    settings.logging.file = ""
    assert log_file_path(settings) is None


def test_per_logger_level_overrides(settings, vidsum_logger) -> None:
    settings.logging.file = None
    settings.logging.levels = {"vidsum.pipeline": "debug"}
    setup_logging(settings)

    assert vidsum_logger.level == logging.INFO
    assert [type(h) for h in vidsum_logger.handlers] == [logging.StreamHandler]
    assert logging.getLogger("vidsum.pipeline").level == logging.DEBUG
