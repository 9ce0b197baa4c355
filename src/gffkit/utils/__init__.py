"""Utility functions for gffkit.

Example:
    >>> from gffkit.utils import setup_logging
    >>> setup_logging(verbose=True)
"""

from gffkit.utils.logging import setup_logging, verbosity_level

__all__ = [
    "setup_logging",
    "verbosity_level",
]
