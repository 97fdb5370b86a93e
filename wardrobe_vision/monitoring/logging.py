"""Logging setup shared by the API process and the probe script."""

from __future__ import annotations

import logging

from wardrobe_vision.config.settings import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
# HTTP client request lines stay at WARNING unless debugging.
_CHATTY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger; ``level`` overrides ``LOG_LEVEL``."""

    name = (level or get_settings().log_level).upper()
    resolved = getattr(logging, name, logging.INFO)
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
    chatty_level = logging.DEBUG if resolved <= logging.DEBUG else logging.WARNING
    for logger_name in _CHATTY_LOGGERS:
        logging.getLogger(logger_name).setLevel(chatty_level)
