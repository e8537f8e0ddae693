"""Unit tests for log.py"""

import logging

from mdblog.log import configure_logging


def test_configure_logging_sets_root_level():
    configure_logging("DEBUG")
    assert logging.getLogger().level == logging.DEBUG
    configure_logging("error")
    assert logging.getLogger().level == logging.ERROR


def test_configure_logging_unknown_level_defaults_to_warning():
    configure_logging("LOUD")
    assert logging.getLogger().level == logging.WARNING
