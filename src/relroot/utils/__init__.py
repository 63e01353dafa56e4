"""Utilities for relroot."""

from .config import load_config
from .core import setup_logging

__all__ = [
    "load_config",
    "setup_logging",
]
