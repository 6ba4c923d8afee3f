import logging as root_logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

_SDK_LOGGER_NAME = "objectquery"


def setup_sdk_logging(
    level="INFO",
    pretty: bool = False,
    console: Optional[Console] = None,
    propagate: bool = False,
):
    """
    Routes the `objectquery` logger namespace to a visible handler.

    Until this is called the SDK is silent (the package installs a
    `NullHandler` at import). What gets logged:

    * `DEBUG`: every dispatched query with its encoded parameters, `or_`
      operands skipped for having no constraint, merge conflicts, and
      cancellations observed by the [`QueryClient`][objectquery.comm.QueryClient].
    * `WARNING`: queries rejected because they target a reserved collection.

    Calling it again replaces the previous handler, so the level or output
    can be switched at runtime without duplicating records.

    Args:
        level (str): The logging threshold (e.g., "DEBUG" to see the wire
            parameters of each query). Defaults to "INFO".
        pretty (bool): If True, records go through a Rich handler with
            colored levels, source locations and rich tracebacks. Otherwise a
            plain `StreamHandler` writes `time [LEVEL] logger: message` lines
            to stderr, which suits log collectors.
        console (Optional[rich.console.Console]): Rich console used in pretty
            mode, e.g. one writing to a file or a `StringIO`. Ignored when
            `pretty` is False. Defaults to a new `Console(stderr=True)`.
        propagate (bool): Whether SDK records also reach the root logger.
            Off by default, so an application that configures the root logger
            does not print SDK records twice.
    """
    logger = root_logging.getLogger(_SDK_LOGGER_NAME)

    # Clear existing handlers (including the import-time NullHandler)
    if logger.hasHandlers():
        logger.handlers.clear()

    if pretty:
        console = console or Console(stderr=True)

        handler = RichHandler(
            level=level,
            console=console,
            show_time=True,
            show_path=True,
            markup=True,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        formatter = root_logging.Formatter(
            fmt="[dim white]%(name)s[/dim white]: %(message)s", datefmt="[%X]"
        )
        handler.setFormatter(formatter)
        init_message = f"objectquery logging enabled at level [bold]{level}[/bold]"
        extra = {"markup": True}
    else:
        handler = root_logging.StreamHandler(sys.stderr)
        # Time [Level] Name: Message
        formatter = root_logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        init_message = f"objectquery logging enabled at level {level}"
        extra = {}

    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate

    logger.info(init_message, extra=extra)


def get_logger(name: Optional[str] = None):
    """
    Returns a logger in the `objectquery` namespace.

    Modules call `get_logger(__name__)`, so records carry the emitting module
    (e.g. `objectquery.comm.query_client`) and follow the handler installed by
    [`setup_sdk_logging`][objectquery.logging_config.setup_sdk_logging].
    Without a name the top-level `objectquery` logger is returned.
    """
    return root_logging.getLogger(name or _SDK_LOGGER_NAME)
