"""
Base repository class.
"""

import logging
from typing import TypeVar, Generic, List, Optional, Callable, Any, Sequence

import psycopg2

from ..database.connection_manager import DatabaseConnectionManager
from ..exceptions import DatabaseQueryError


T = TypeVar('T')


class BaseRepository(Generic[T]):
    """
    Base class for repositories providing common read helpers.

    Repositories are shared between threads; they hold no per-call state and
    borrow a pooled connection for every operation.
    """

    def __init__(self, db_manager: DatabaseConnectionManager):
        """
        Initialize the repository with a database manager.

        Args:
            db_manager: Database connection manager instance
        """
        self.db_manager = db_manager
        self.logger = logging.getLogger(__name__)
        self.table_name = ""  # To be set by subclasses

    # ============================================================================
    # READ HELPERS
    # ============================================================================

    def _fetch_all(self,
                   query: str,
                   params: Sequence[Any],
                   operation: str,
                   row_mapper: Callable[[Any], T]) -> List[T]:
        """
        Run a SELECT and map every row.

        Raises:
            DatabaseQueryError: If database operation fails
        """
        try:
            with self.db_manager.get_cursor_context(commit=False) as cursor:
                cursor.execute(query, params)
                rows = cursor.fetchall()
        except psycopg2.Error as e:
            raise DatabaseQueryError(operation, str(e))
        return [row_mapper(row) for row in rows]

    def _fetch_one(self,
                   query: str,
                   params: Sequence[Any],
                   operation: str,
                   row_mapper: Callable[[Any], T]) -> Optional[T]:
        """
        Run a SELECT expected to return at most one row.

        Raises:
            DatabaseQueryError: If database operation fails
        """
        try:
            with self.db_manager.get_cursor_context(commit=False) as cursor:
                cursor.execute(query, params)
                row = cursor.fetchone()
        except psycopg2.Error as e:
            raise DatabaseQueryError(operation, str(e))
        return row_mapper(row) if row else None

    def count(self) -> int:
        """
        Count the total number of rows in the repository table.

        Raises:
            DatabaseQueryError: If database operation fails
        """
        try:
            with self.db_manager.get_cursor_context(commit=False) as cursor:
                cursor.execute(f'SELECT COUNT(*) FROM {self.table_name};')
                result = cursor.fetchone()
                return result[0] if result else 0
        except psycopg2.Error as e:
            raise DatabaseQueryError(f"count {self.table_name}", str(e))

