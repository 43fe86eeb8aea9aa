"""
Symbol catalog synchronization script.

Fetches the Taiwan and US stock catalogs from FinMind and upserts them into
the symbols table through a bounded pool of worker threads:
- Maps each catalog entry to a Symbol, skipping invalid entries
- Splits the symbols into fixed-size batches
- Upserts the batches concurrently and aggregates per-batch outcomes

Runs once on startup and then every SYNC_INTERVAL_HOURS.
"""

import logging
import sys
from typing import Dict, Optional

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from data_layer import DatabaseConnectionManager, Market, SymbolsRepository
from integrations import FinMindClient, UpstreamAPIError
from scheduled_jobs.config import load_config, ConfigError
from scheduled_jobs.startup import StartupError, initialize_all
from scheduled_jobs.startup.bootstrap import build_sync_units, build_sync_dependent_units
from scheduled_jobs.utils import configure_logging, check_database_connectivity, close_database
from .constants import BATCH_SIZE, MAX_WORKERS
from .entities.synchronization_result import SynchronizationResult
from .transformer.transformer import map_stock_info_to_symbols
from .utils.utils import run_batch_upsert

logger = logging.getLogger(__name__)


class SymbolSyncService:
    """Reconciles the FinMind symbol catalogs with the symbols table."""

    def __init__(self,
                 symbols_repo: SymbolsRepository,
                 finmind_client: FinMindClient,
                 batch_size: int = BATCH_SIZE,
                 max_workers: int = MAX_WORKERS):
        self.symbols_repo = symbols_repo
        self.finmind_client = finmind_client
        self.batch_size = batch_size
        self.max_workers = max_workers

    def sync_market(self, market: Market) -> Optional[SynchronizationResult]:
        """
        Synchronize one market's catalog.

        A response envelope with a non-200 status is logged and skipped
        (returns None) so a quota or token problem does not stop the process.

        Raises:
            UpstreamAPIError: If the catalog cannot be fetched or decoded
        """
        logger.info(f"=== Starting {market.value} symbol synchronization ===")

        try:
            response = self.finmind_client.get_stock_info(market)
        except UpstreamAPIError as e:
            logger.error(f"Failed to fetch {market.value} stock info: {e}")
            raise

        if not response.ok:
            logger.error(f"FinMind returned status {response.status} for {market.value} stock info: {response.msg}")
            return None

        logger.info(f"Fetched {len(response.data)} {market.value} catalog entries")

        symbols = map_stock_info_to_symbols(response.data, market)
        outcomes = run_batch_upsert(
            symbols,
            self.symbols_repo.batch_upsert,
            batch_size=self.batch_size,
            max_workers=self.max_workers,
        )

        result = SynchronizationResult(
            market=market,
            fetched=len(response.data),
            submitted=len(symbols),
            success_count=sum(outcome.success_count for outcome in outcomes),
            error_count=sum(outcome.error_count for outcome in outcomes),
            failed_batches=sum(1 for outcome in outcomes if outcome.failed),
        )
        log_synchronization_result(result)
        return result

    def sync_taiwan_stock_info(self) -> Optional[SynchronizationResult]:
        return self.sync_market(Market.TW)

    def sync_us_stock_info(self) -> Optional[SynchronizationResult]:
        return self.sync_market(Market.US)

    def sync_all_markets(self) -> Dict[Market, Optional[SynchronizationResult]]:
        """
        Synchronize every market; a failure in one market does not stop the others.

        Returns:
            Mapping of market to its result (None when skipped or failed)
        """
        results: Dict[Market, Optional[SynchronizationResult]] = {}
        for market in Market:
            try:
                results[market] = self.sync_market(market)
            except Exception as e:
                logger.error(f"{market.value} synchronization failed: {e}")
                results[market] = None
        return results

    def get_sync_stats(self) -> Dict[str, int]:
        """Symbol counts per market currently in the store."""
        return self.symbols_repo.get_market_stats()


def log_synchronization_result(result: SynchronizationResult) -> None:
    stats = result.get_stats()
    logger.info(f"""
{result.market.value} Synchronization Results:
  - Fetched from FinMind: {stats['fetched']}
  - Submitted for upsert: {stats['submitted']}
  - Skipped (invalid/duplicate): {stats['skipped']}
  - Upserted: {stats['success']}
  - Failed: {stats['errors']}
  - Failed batches: {stats['failed_batches']}
    """)


def run_sync(sync_service: SymbolSyncService) -> None:
    """Scheduled job body: sync all markets and log the catalog totals."""
    sync_service.sync_all_markets()
    try:
        stats = sync_service.get_sync_stats()
        logger.info(f"Final catalog state: {stats}")
    except Exception as e:
        logger.warning(f"Could not retrieve final statistics: {e}")


def main():
    """Run the symbol sync once, then on the configured interval."""
    try:
        config = load_config()
    except ConfigError as e:
        configure_logging()
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    configure_logging(config.log_level)

    try:
        logger.info("Initializing data layer...")
        db_manager = DatabaseConnectionManager(
            config.database_url,
            min_connections=config.db_min_connections,
            max_connections=config.db_max_connections,
        )
        db_manager.open()
    except Exception as e:
        logger.error(f"Failed to initialize data layer: {e}")
        sys.exit(1)

    try:
        components = initialize_all(
            build_sync_units(config, db_manager),
            timeout=config.init_timeout_seconds,
            dependent_units=build_sync_dependent_units(),
        )
    except StartupError as e:
        logger.error(f"Startup failed: {e}")
        close_database(db_manager)
        sys.exit(1)

    if not check_database_connectivity(db_manager, components["symbols_repo"]):
        logger.error("Cannot proceed without proper database setup.")
        close_database(db_manager)
        sys.exit(1)

    sync_service = components["symbol_sync_service"]

    scheduler = BlockingScheduler(timezone=config.scheduler_timezone)
    scheduler.add_job(
        run_sync,
        IntervalTrigger(hours=config.sync_interval_hours, timezone=config.scheduler_timezone),
        args=[sync_service],
        id="sync_symbols",
        name="Sync symbol catalog",
        max_instances=1,
        coalesce=True,
    )

    try:
        logger.info("Running initial symbol synchronization")
        run_sync(sync_service)

        logger.info(f"Scheduler started: syncing every {config.sync_interval_hours}h")
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Shutting down symbol sync")
    finally:
        close_database(db_manager)


if __name__ == "__main__":
    main()
