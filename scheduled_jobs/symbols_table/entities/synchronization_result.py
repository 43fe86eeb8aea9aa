"""
Entity class for synchronization results.

This module contains the SynchronizationResult entity class used to summarize
one provider-to-store reconciliation of the symbol catalog.
"""

from dataclasses import dataclass
from typing import Dict

from data_layer import Market


@dataclass
class SynchronizationResult:
    """Container for the totals of one market sync."""
    market: Market
    fetched: int = 0  # entries returned by the provider
    submitted: int = 0  # valid, de-duplicated symbols handed to the worker pool
    success_count: int = 0
    error_count: int = 0
    failed_batches: int = 0

    @property
    def skipped(self) -> int:
        """Entries dropped during mapping (invalid or duplicate)."""
        return self.fetched - self.submitted

    def get_stats(self) -> Dict[str, int]:
        """Get summary statistics."""
        return {
            'fetched': self.fetched,
            'submitted': self.submitted,
            'skipped': self.skipped,
            'success': self.success_count,
            'errors': self.error_count,
            'failed_batches': self.failed_batches,
        }
