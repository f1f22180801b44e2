import logging

import pytest


@pytest.fixture(autouse=True)
def restore_extfmt_logger():
    """CLI commands reconfigure the `extfmt` logger; undo that after each test."""
    logger = logging.getLogger("extfmt")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate
