"""
Utilities package for the task query engine.

Exports shared helpers for logging and timestamps. Keep this package
lightweight and free of domain-specific logic.
"""

from taskcore.utils.logging import configure_logging, get_logger
from taskcore.utils.time import ensure_aware, parse_instant, to_utc_z, utc_now

__all__ = [
    "configure_logging",
    "ensure_aware",
    "get_logger",
    "parse_instant",
    "to_utc_z",
    "utc_now",
]
