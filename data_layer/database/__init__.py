"""
Database package initialization.
"""

from .connection_manager import DatabaseConnectionManager

__all__ = ["DatabaseConnectionManager"]
