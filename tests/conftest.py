"""Shared pytest fixtures."""

import logging
from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from terminal_brief.core.logging_setup import MODULE_LOGGER, ROOT_LOGGER


@pytest.fixture(autouse=True)
def reset_brief_loggers():
    """Undo setup_logging so caplog sees records in every test."""
    yield
    for name in (ROOT_LOGGER, MODULE_LOGGER):
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True
