"""
Symbols repository for database operations.
"""

import logging
from datetime import datetime
from typing import List, Optional, Dict, Tuple

import psycopg2

from .base_repository import BaseRepository
from ..models.symbol import Symbol, Market
from ..database.connection_manager import DatabaseConnectionManager
from ..exceptions import DatabaseQueryError, DatabaseConnectionError


class SymbolsRepository(BaseRepository[Symbol]):
    """
    Repository for the symbol catalog.
    Symbols are unique on (symbol, market); writes are idempotent upserts.
    """

    SELECT_COLUMNS = "id, symbol, name, market, created_at, last_updated_at"

    UPSERT_QUERY = """
    INSERT INTO symbols (symbol, name, market, created_at, last_updated_at)
    VALUES (%s, %s, %s, %s, %s)
    ON CONFLICT (symbol, market) DO UPDATE SET
        name = EXCLUDED.name,
        last_updated_at = EXCLUDED.last_updated_at;
    """

    def __init__(self, db_manager: DatabaseConnectionManager):
        """
        Initialize the symbols repository.

        Args:
            db_manager: Database connection manager instance
        """
        super().__init__(db_manager)
        self.logger = logging.getLogger(__name__)
        self.table_name = "symbols"

    # ============================================================================
    # CREATE / UPDATE OPERATIONS
    # ============================================================================

    def batch_upsert(self, symbols: List[Symbol]) -> Tuple[int, int]:
        """
        Upsert a batch of symbols in one transaction.

        Every record runs under its own savepoint, so a record that violates a
        constraint is rolled back and counted as an error without discarding the
        rest of the batch.

        Args:
            symbols: Symbols to upsert

        Returns:
            Tuple of (success_count, error_count)

        Raises:
            DatabaseConnectionError: If no connection can be obtained
            DatabaseQueryError: If the batch transaction itself cannot be committed
        """
        if not symbols:
            return 0, 0

        success_count = 0
        error_count = 0
        current_time = datetime.now()

        try:
            with self.db_manager.get_connection_context() as conn:
                with conn.cursor() as cursor:
                    for symbol in symbols:
                        cursor.execute("SAVEPOINT symbol_upsert;")
                        try:
                            cursor.execute(self.UPSERT_QUERY, (
                                symbol.symbol,
                                symbol.name,
                                symbol.market.value,
                                current_time,
                                current_time
                            ))
                        except psycopg2.Error as e:
                            cursor.execute("ROLLBACK TO SAVEPOINT symbol_upsert;")
                            error_count += 1
                            self.logger.warning(f"Failed to upsert symbol {symbol}: {e}")
                        else:
                            cursor.execute("RELEASE SAVEPOINT symbol_upsert;")
                            success_count += 1
                conn.commit()
        except DatabaseConnectionError:
            raise
        except psycopg2.Error as e:
            raise DatabaseQueryError("batch upsert symbols", str(e))

        self.logger.debug(f"Batch upserted {success_count} symbols ({error_count} failed)")
        return success_count, error_count

    # ============================================================================
    # READ OPERATIONS
    # ============================================================================

    def get_by_symbol(self, symbol: str, market: Market = Market.TW) -> Optional[Symbol]:
        """
        Retrieve a symbol by its code and market.

        Returns:
            Symbol if found, None otherwise
        """
        query = f"SELECT {self.SELECT_COLUMNS} FROM symbols WHERE symbol = %s AND market = %s;"
        return self._fetch_one(
            query,
            (symbol.strip().upper(), market.value),
            "get symbol by code",
            Symbol.from_db_row
        )

    def get_market_stats(self) -> Dict[str, int]:
        """
        Count catalog entries per market.

        Returns:
            Dictionary mapping market code to symbol count
        """
        query = "SELECT market, COUNT(*) FROM symbols GROUP BY market ORDER BY market;"
        try:
            with self.db_manager.get_cursor_context(commit=False) as cursor:
                cursor.execute(query)
                return {market: count for market, count in cursor.fetchall()}
        except psycopg2.Error as e:
            raise DatabaseQueryError("get market stats", str(e))
