"""Process logging configuration.

Library modules only call ``logging.getLogger(__name__)``; the CLI calls
``configure_logging`` once so records render through Rich.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_HANDLER_NAME = "femtorelease-rich"


def configure_logging(level: str = "INFO", console: Console | None = None) -> None:
    """Attach a ``RichHandler`` to the ``femtorelease`` logger at *level*.

    Calling it again replaces the handler rather than stacking another one.
    """
    logger = logging.getLogger("femtorelease")
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logger.setLevel(numeric)

    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        show_time=False,
        markup=False,
    )
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
