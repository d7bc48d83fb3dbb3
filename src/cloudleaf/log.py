"""Logging setup.

Modules log through ``logging.getLogger(__name__)``; the CLI calls
:func:`configure_logging` once to route records through Rich.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

_HANDLER_NAME = "cloudleaf-rich"


def configure_logging(level: str = "WARNING", console: Optional[Console] = None) -> None:
    """Attach a RichHandler to the ``cloudleaf`` logger.

    Calling this more than once only updates the level.
    """
    logger = logging.getLogger("cloudleaf")
    logger.setLevel(level.upper())

    if any(h.get_name() == _HANDLER_NAME for h in logger.handlers):
        return

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
