"""CLI commands"""

from .generate import GenerateResult, expand_patterns, generate_all, generate_one
from .utils import console, setup_logging

__all__ = [
    "GenerateResult",
    "console",
    "expand_patterns",
    "generate_all",
    "generate_one",
    "setup_logging",
]
