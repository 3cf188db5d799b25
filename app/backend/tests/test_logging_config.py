"""
Tests for logging setup in logging_config.py.
"""
import logging

from logging_config import setup_logging


def _file_handlers():
    return [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]


def test_setup_logging_closes_replaced_file_handler(tmp_path):
    """Reconfiguring logging closes the previous log file."""
    setup_logging(logging.INFO, str(tmp_path / "first.log"))
    first = _file_handlers()
    assert len(first) == 1

    setup_logging(logging.INFO, str(tmp_path / "second.log"))
    second = _file_handlers()

    assert len(second) == 1
    assert second[0] is not first[0]
    assert first[0].stream is None  # closed

    # Back to console-only logging
    setup_logging(logging.INFO)
    assert _file_handlers() == []
    assert second[0].stream is None


def test_setup_logging_accepts_level_names():
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG

    setup_logging("not-a-level")
    assert logging.getLogger().level == logging.INFO
