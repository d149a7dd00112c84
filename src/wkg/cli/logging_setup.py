"""Process-wide logging configuration for the ``wkg`` CLI.

Library modules only create ``logging.getLogger(__name__)`` loggers; this
module is the single place that attaches a handler.  Rich renders the
records when installed, otherwise a plain stderr handler is used.

Level selection
---------------
* ``WKG_LOG`` environment variable (``debug``, ``info``, ``warning``, …).
* ``-v`` raises to INFO, ``-vv`` to DEBUG; the more verbose setting wins.
* Default: WARNING.
"""

from __future__ import annotations

import logging
import os

LOG_ENV_VAR: str = "WKG_LOG"

_VERBOSITY_LEVELS: tuple[int, ...] = (logging.WARNING, logging.INFO, logging.DEBUG)


def resolve_level(verbosity: int = 0, env_value: str | None = None) -> int:
    """Return the effective log level for *verbosity* and *env_value*."""
    level = _VERBOSITY_LEVELS[min(max(verbosity, 0), len(_VERBOSITY_LEVELS) - 1)]
    if env_value:
        named = logging.getLevelName(env_value.strip().upper())
        if isinstance(named, int):
            level = min(level, named)
    return level


def configure_logging(verbosity: int = 0) -> int:
    """Attach a stderr handler to the ``wkg`` logger and return its level."""
    level = resolve_level(verbosity, os.environ.get(LOG_ENV_VAR))

    try:
        from rich.logging import RichHandler

        from wkg.cli.console import get_rich_console

        handler: logging.Handler = RichHandler(
            console=get_rich_console(),
            show_time=False,
            show_path=level <= logging.DEBUG,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    except ModuleNotFoundError:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

    logger = logging.getLogger("wkg")
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return level
