"""Shared utilities for CLI commands"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the qen CLI.

    Log levels:
    - Normal: Only warnings/errors shown (ambiguous templates, conflicting uses)
    - Verbose (-v): INFO level - shows each compiled template
    - Debug (QEN_DEBUG=1): DEBUG level - shows everything
    """
    if os.environ.get("QEN_DEBUG"):
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    # Use RichHandler for pretty output
    handler = RichHandler(
        console=console,
        show_time=verbose,
        show_path=bool(os.environ.get("QEN_DEBUG")),
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    # InferenceAmbiguityWarning goes through warnings.warn
    logging.captureWarnings(True)

    for name in ("qen", "py.warnings"):
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.handlers = [handler]
        logger.propagate = False
