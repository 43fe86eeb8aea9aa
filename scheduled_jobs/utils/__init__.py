"""
Shared helpers for the scheduled job entry points.
"""
from .utils import (
    configure_logging,
    check_database_connectivity,
    close_database,
)

__all__ = [
    'configure_logging',
    'check_database_connectivity',
    'close_database',
]
