from __future__ import annotations

import logging

from rich.logging import RichHandler

from core.logging_setup import configure_logging


def test_configure_logging_installs_rich_handler():
    configure_logging("info")
    root = logging.getLogger()
    assert root.level == logging.INFO
    assert any(isinstance(h, RichHandler) for h in root.handlers)
    assert logging.getLogger("httpx").level == logging.WARNING


def test_configure_logging_debug_unmutes_httpx():
    configure_logging("DEBUG")
    assert logging.getLogger("httpx").level == logging.DEBUG


def test_configure_logging_unknown_level_falls_back():
    configure_logging("chatty")
    assert logging.getLogger().level == logging.WARNING
