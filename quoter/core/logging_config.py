# quoter/core/logging_config.py
import logging
import sys
from typing import Optional, TextIO

import structlog


def setup_logging(
    level: Optional[str] = None,
    json_logs: Optional[bool] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure structlog on top of standard logging.
    Defaults come from Settings (log_level / log_json); output goes to `stream`,
    stdout when omitted. Replaces any handlers already on the root logger.
    """
    from quoter.config import get_settings

    s = get_settings()
    level_name = (level or s.log_level).upper()
    use_json = s.log_json if json_logs is None else json_logs

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        level=getattr(logging, level_name, logging.INFO),
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "quoter"):
    return structlog.get_logger(name)


# Global logger you can import anywhere
logger = get_logger("quoter")
