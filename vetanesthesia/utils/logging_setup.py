"""Root logger configuration shared by entry points and exporters."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_ENV_LEVEL = "VETANESTHESIA_LOG_LEVEL"
HANDLER_NAME = "vetanesthesia"


def setup_logging(level: str | int | None = None) -> None:
    """Configure the root logger once.

    Level comes from the argument, then $VETANESTHESIA_LOG_LEVEL, then INFO.
    Repeated calls only adjust the level.
    """
    if level is None:
        level = os.environ.get(_ENV_LEVEL, "INFO")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    if any(h.get_name() == HANDLER_NAME for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.set_name(HANDLER_NAME)
    root.addHandler(handler)
