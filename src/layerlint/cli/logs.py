"""
Logging setup for the CLI.
"""

import logging

from rich.logging import RichHandler


def setup_logging(verbose: bool = False):
    """Route engine logs through rich. Verbose shows per-layer progress."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
