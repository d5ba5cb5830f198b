"""
Logging setup shared by the CLI and the API server.
"""
import logging
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s - %(message)s"


def configure_logging(level: Optional[Union[str, int]] = None) -> None:
    """
    Configure root logging once.

    Args:
        level: Logging level name or number (default: settings.log_level)
    """
    if level is None:
        from config.settings import settings
        level = settings.log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    if not any(getattr(handler, '_fulltext_handler', False) for handler in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._fulltext_handler = True
        root.addHandler(handler)
    root.setLevel(level)
