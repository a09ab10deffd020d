from __future__ import annotations

import logging

from hireflow.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_CHATTY_LOGGERS = ("httpx", "openai", "multipart")

_LOG_CONFIGURED = False


def configure_logging(level: str | None = None) -> None:
    global _LOG_CONFIGURED
    if _LOG_CONFIGURED:
        return

    level_name = (level or get_settings().log_level).upper()
    root_level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=root_level, format=LOG_FORMAT)

    if root_level > logging.DEBUG:
        for name in _CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
    _LOG_CONFIGURED = True
