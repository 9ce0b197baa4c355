"""Logging setup for the gffkit command line.

Library modules only create loggers with ``logging.getLogger(__name__)``
and never attach handlers. The CLI calls :func:`setup_logging` once per
invocation so that bad-line warnings and timing messages reach stderr,
leaving stdout to the command's own report.

Example:
    >>> from gffkit.utils.logging import setup_logging
    >>> setup_logging(verbose=True).name
    'gffkit'
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "gffkit"


def verbosity_level(verbose: bool = False, quiet: bool = False) -> int:
    """Logging level for the CLI's -v/-q flags; --quiet wins."""
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.INFO


def setup_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """Route ``gffkit`` log records to stderr through rich.

    Handlers from an earlier call are replaced, so the CLI can run
    repeatedly in one process (as it does under test).

    Args:
        verbose: Also show debug messages (score collapse, read summaries).
        quiet: Show errors only.

    Returns:
        The ``gffkit`` package logger.
    """
    level = verbosity_level(verbose, quiet)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # Messages quote raw GFF3 text, which must not be read as rich markup
    handler = RichHandler(
        console=Console(stderr=True),
        level=level,
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)

    return logger
