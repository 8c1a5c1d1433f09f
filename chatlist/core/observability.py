from __future__ import annotations

import logging
from threading import Lock

from chatlist.core.config import get_settings

logger = logging.getLogger(__name__)

_configure_lock = Lock()
_is_configured = False

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging() -> None:
    global _is_configured
    if _is_configured:
        return

    with _configure_lock:
        if _is_configured:
            return
        settings = get_settings()
        level = logging.getLevelName(settings.log_level.upper())
        if not isinstance(level, int):
            logger.warning(
                "Unknown LOG_LEVEL %r; falling back to INFO.",
                settings.log_level,
            )
            level = logging.INFO

        package_logger = logging.getLogger("chatlist")
        package_logger.setLevel(level)
        if not package_logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(_LOG_FORMAT))
            package_logger.addHandler(handler)
        _is_configured = True
