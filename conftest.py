"""Global configuration for pytest"""

import logging

import pytest


@pytest.fixture(autouse=True)
def restore_log_level():
    """
    Called around each test, guarantees that a test that changes the level of
    the shaderblocks logger does not affect subsequent tests.
    """
    logger = logging.getLogger("shaderblocks")
    level = logger.level
    yield
    logger.setLevel(level)
