import logging
import sys
from typing import Optional

from site_builder.core.config import Settings, get_settings


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Third-party loggers that log every request line at INFO.
QUIET_LOGGERS = ("uvicorn", "uvicorn.access", "httpx", "httpcore")

_configured = False


def resolve_log_level(settings: Settings, level_override: Optional[str] = None) -> str:
    if level_override:
        return level_override.upper()
    if settings.debug:
        return "DEBUG"
    return settings.log_level.upper()


def configure_logging(
    settings: Optional[Settings] = None,
    level_override: Optional[str] = None,
) -> None:
    """
    Configure process-wide logging for the gateway.

    Idempotent: only the first call installs handlers.
    """
    global _configured

    if _configured:
        return

    settings = settings or get_settings()
    log_level = resolve_log_level(settings, level_override)

    logging.basicConfig(level=log_level, format=LOG_FORMAT, stream=sys.stdout)
    logging.getLogger("site_builder").setLevel(log_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True
