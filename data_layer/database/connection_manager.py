"""
Database connection manager for PostgreSQL.

The pool is shared by every worker thread of the symbol sync engine and by
the notification jobs, so it is a ThreadedConnectionPool sized from config.
"""

import os
import logging
from typing import Optional
from contextlib import contextmanager

import psycopg2
from psycopg2 import pool

from ..exceptions import DatabaseConnectionError


class DatabaseConnectionManager:
    """
    Manages PostgreSQL database connections with thread-safe connection pooling.
    """

    def __init__(self,
                 connection_string: Optional[str] = None,
                 min_connections: int = 1,
                 max_connections: int = 10):
        """
        Initialize the database connection manager.

        Args:
            connection_string: PostgreSQL connection string. If None, reads from DATABASE_URL env var.
            min_connections: Minimum number of connections in the pool.
            max_connections: Maximum number of connections in the pool. Should be at least
                the number of sync workers plus one for the notification jobs.
        """
        self.logger = logging.getLogger(__name__)

        self.connection_string = connection_string or os.getenv('DATABASE_URL')
        if not self.connection_string:
            raise DatabaseConnectionError(
                "No database connection string provided. Set DATABASE_URL environment variable "
                "or pass connection_string parameter."
            )

        if min_connections < 1 or max_connections < min_connections:
            raise DatabaseConnectionError(
                f"Invalid pool size {min_connections}-{max_connections}"
            )

        self.min_connections = min_connections
        self.max_connections = max_connections
        self._connection_pool: Optional[pool.ThreadedConnectionPool] = None

    def open(self) -> None:
        """Create the connection pool eagerly so startup fails fast on a bad DATABASE_URL."""
        if self._connection_pool is not None:
            return
        try:
            self._connection_pool = pool.ThreadedConnectionPool(
                self.min_connections,
                self.max_connections,
                self.connection_string
            )
            self.logger.info(f"Created connection pool with {self.min_connections}-{self.max_connections} connections")
        except psycopg2.Error as e:
            raise DatabaseConnectionError(f"Failed to create connection pool: {e}")

    def get_connection(self):
        """
        Get a connection from the pool.

        Returns:
            psycopg2.extensions.connection: Database connection
        """
        if self._connection_pool is None:
            self.open()

        try:
            conn = self._connection_pool.getconn()
        except pool.PoolError as e:
            raise DatabaseConnectionError(f"Failed to get connection from pool: {e}")
        if not conn:
            raise DatabaseConnectionError("No connection available in pool")
        return conn

    def return_connection(self, conn):
        """
        Return a connection to the pool.

        Args:
            conn: Database connection to return
        """
        if self._connection_pool and conn:
            try:
                self._connection_pool.putconn(conn)
            except pool.PoolError as e:
                self.logger.error(f"Failed to return connection to pool: {e}")

    @contextmanager
    def get_connection_context(self):
        """
        Context manager for a raw pooled connection. The caller owns commit/rollback;
        on an exception the transaction is rolled back before the connection is returned.

        Yields:
            psycopg2.extensions.connection: Database connection
        """
        conn = self.get_connection()
        try:
            yield conn
        except Exception:
            conn.rollback()
            raise
        finally:
            self.return_connection(conn)

    @contextmanager
    def get_cursor_context(self, commit: bool = True):
        """
        Context manager for database cursor with automatic connection management.

        Args:
            commit: Whether to commit the transaction automatically

        Yields:
            psycopg2.extensions.cursor: Database cursor
        """
        with self.get_connection_context() as conn:
            with conn.cursor() as cursor:
                yield cursor
            if commit:
                conn.commit()
            else:
                conn.rollback()

    def test_connection(self) -> bool:
        """
        Test the database connection.

        Returns:
            bool: True if connection is successful, False otherwise
        """
        try:
            with self.get_cursor_context(commit=False) as cursor:
                cursor.execute("SELECT 1")
                result = cursor.fetchone()
                return result is not None and result[0] == 1
        except (psycopg2.Error, DatabaseConnectionError) as e:
            self.logger.error(f"Database connection test failed: {e}")
            return False

    def close_all_connections(self):
        """Close all connections in the pool."""
        if self._connection_pool:
            try:
                self._connection_pool.closeall()
                self.logger.info("Closed all database connections")
            except pool.PoolError as e:
                self.logger.error(f"Error closing connections: {e}")
            finally:
                self._connection_pool = None
