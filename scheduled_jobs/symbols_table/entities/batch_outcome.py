"""
Entity class for the outcome of one upsert batch.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class BatchOutcome:
    """Result a worker reports for exactly one batch."""
    batch_id: int
    batch_size: int
    success_count: int
    error_count: int
    error: Optional[BaseException] = None

    @property
    def failed(self) -> bool:
        return self.error is not None
