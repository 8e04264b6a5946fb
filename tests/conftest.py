import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_powerposition_logger():
    """Undo configure_logging() so caplog keeps seeing records."""
    yield
    logger = logging.getLogger('powerposition')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
