"""Test configuration for pytest."""

import logging
import os
import pytest


@pytest.fixture(autouse=True)
def configure_test_logging():
    """Configure logging for tests to be minimal."""
    os.environ['VIDSIFT_LOG_LEVEL'] = 'WARNING'

    logging.getLogger().setLevel(logging.WARNING)

    # Sampling logs a warning for every video it cannot decode
    for logger_name in ['vidsift.video.sampling', 'vidsift.video.decoder']:
        logging.getLogger(logger_name).setLevel(logging.ERROR)
