"""
Worker pool for concurrent batch upserts.

Batches are handed to a fixed set of worker threads through a shared queue.
Each worker reports one BatchOutcome per batch on a result queue, and the
calling thread is the only place where totals are accumulated.
"""

import logging
import queue
import threading
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from ..constants import BATCH_SIZE, MAX_WORKERS
from ..entities.batch_outcome import BatchOutcome
from ..transformer.transformer import split_into_batches

logger = logging.getLogger(__name__)

T = TypeVar('T')

UpsertFunc = Callable[[List[T]], Tuple[int, int]]

# Work item: (batch_id, batch); None tells a worker to exit
WorkItem = Optional[Tuple[int, List[T]]]


def _worker(worker_id: int,
            work_queue: "queue.Queue[WorkItem]",
            result_queue: "queue.Queue[BatchOutcome]",
            upsert_func: UpsertFunc) -> None:
    while True:
        item = work_queue.get()
        if item is None:
            return

        batch_id, batch = item
        logger.debug(f"Worker {worker_id} processing batch {batch_id} ({len(batch)} records)")
        try:
            success_count, error_count = upsert_func(batch)
            outcome = BatchOutcome(batch_id, len(batch), success_count, error_count)
        except Exception as e:
            logger.error(f"Worker {worker_id} failed batch {batch_id}: {e}")
            outcome = BatchOutcome(batch_id, len(batch), 0, len(batch), e)

        result_queue.put(outcome)
        logger.debug(
            f"Worker {worker_id} finished batch {batch_id}: "
            f"{outcome.success_count} ok, {outcome.error_count} failed"
        )


def run_batch_upsert(records: Sequence[T],
                     upsert_func: UpsertFunc,
                     batch_size: int = BATCH_SIZE,
                     max_workers: int = MAX_WORKERS) -> List[BatchOutcome]:
    """
    Upsert records concurrently in batches.

    At most max_workers batches are in flight at once. A batch whose upsert
    raises is counted as entirely failed and the remaining batches continue.
    Returns only after every batch has reported and every worker has exited.

    Args:
        records: Records to persist
        upsert_func: Called once per batch, returns (success_count, error_count)
        batch_size: Maximum records per batch
        max_workers: Maximum concurrent workers

    Returns:
        One BatchOutcome per batch, in completion order

    Raises:
        ValueError: If batch_size or max_workers is less than 1
    """
    if max_workers < 1:
        raise ValueError(f"max_workers must be at least 1, got {max_workers}")

    batches = split_into_batches(records, batch_size)
    if not batches:
        logger.info("No records to upsert")
        return []

    worker_count = min(max_workers, len(batches))
    logger.info(f"Starting batch upsert: {len(records)} records, {len(batches)} batches, {worker_count} workers")

    work_queue: "queue.Queue[WorkItem]" = queue.Queue()
    result_queue: "queue.Queue[BatchOutcome]" = queue.Queue()

    for batch_id, batch in enumerate(batches, start=1):
        work_queue.put((batch_id, batch))
    for _ in range(worker_count):
        work_queue.put(None)

    workers = [
        threading.Thread(
            target=_worker,
            args=(worker_id, work_queue, result_queue, upsert_func),
            name=f"upsert-worker-{worker_id}",
            daemon=True,
        )
        for worker_id in range(1, worker_count + 1)
    ]
    for worker in workers:
        worker.start()

    total_success = 0
    total_error = 0
    outcomes: List[BatchOutcome] = []
    for _ in range(len(batches)):
        outcome = result_queue.get()
        outcomes.append(outcome)
        if outcome.failed:
            logger.warning(f"Batch {outcome.batch_id} failed: {outcome.error}")
        total_success += outcome.success_count
        total_error += outcome.error_count

    for worker in workers:
        worker.join()

    logger.info(f"Batch upsert complete: {total_success} succeeded, {total_error} failed")
    return outcomes


def async_batch_upsert(records: Sequence[T],
                       upsert_func: UpsertFunc,
                       batch_size: int = BATCH_SIZE,
                       max_workers: int = MAX_WORKERS) -> Tuple[int, int]:
    """Upsert records concurrently and return (total_success, total_error)."""
    outcomes = run_batch_upsert(records, upsert_func, batch_size, max_workers)
    return (
        sum(outcome.success_count for outcome in outcomes),
        sum(outcome.error_count for outcome in outcomes),
    )
