import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "tag_blocker"


def configure_logging(debug: bool = False, console: Console | None = None) -> logging.Logger:
    """Route package logs through rich on stderr; DEBUG when ``debug`` is set."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    logger.propagate = False
    return logger
