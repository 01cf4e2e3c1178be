"""
Shared fixtures
"""

import logging

import pytest

from supadata_mcp.core.logging import LOGGER_NAME, logging_manager


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by setup_logging between tests"""
    yield
    logging_manager.close()
    logging_manager._setup_complete = False
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.propagate = True
