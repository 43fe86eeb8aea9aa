"""
Symbol synchronization transformer functions.

This module maps FinMind catalog entries to Symbol records and partitions
record sets into upsert batches.
"""

import logging
from typing import Any, Dict, List, Sequence, TypeVar

from data_layer import Market, Symbol, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar('T')


def map_stock_info_to_symbols(entries: Sequence[Dict[str, Any]], market: Market) -> List[Symbol]:
    """
    Convert FinMind stock info entries into Symbol records.

    Entries that fail validation are logged and skipped. Entries sharing a
    (symbol, market) key are collapsed into one record; the last entry wins
    but keeps the position of the first, so the output order is stable.

    Args:
        entries: Items of the FinMind 'data' array (stock_id, stock_name, ...)
        market: Market the catalog belongs to

    Returns:
        List of unique Symbol records
    """
    symbols: Dict[tuple, Symbol] = {}
    invalid = 0

    for entry in entries:
        try:
            symbol = Symbol(
                symbol=entry.get('stock_id') or "",
                name=entry.get('stock_name') or "",
                market=market,
            )
        except ValidationError as e:
            invalid += 1
            logger.warning(f"Skipping invalid {market.value} entry {entry.get('stock_id')!r}: {e}")
            continue
        symbols[symbol.key] = symbol

    duplicates = len(entries) - invalid - len(symbols)
    if invalid or duplicates:
        logger.info(f"Mapped {len(symbols)} {market.value} symbols ({invalid} invalid, {duplicates} duplicate)")

    return list(symbols.values())


def split_into_batches(records: Sequence[T], batch_size: int) -> List[List[T]]:
    """
    Split records into contiguous batches of at most batch_size, preserving order.

    Raises:
        ValueError: If batch_size is less than 1
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")

    return [list(records[i:i + batch_size]) for i in range(0, len(records), batch_size)]
