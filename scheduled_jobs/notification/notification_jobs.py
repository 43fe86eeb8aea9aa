"""
Subscriber notification scheduler.

Runs every notification job once on startup and then on the configured cron
schedule (SCHEDULER_STOCK_SPEC in SCHEDULER_TIMEZONE):
- Stock price of the day for each subscribed symbol
- Latest news for each subscribed symbol, with link buttons
- Daily market summary for market info subscribers
- Top 20 by volume for volume ranking subscribers
"""

import logging
import sys
from typing import Optional

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from data_layer import (
    ChatPlatform,
    DatabaseConnectionManager,
    SubscriptionFeature,
    SubscriptionRepository,
    SubscriptionSymbolRepository,
)
from integrations import LineBotClient, TelegramBotClient
from scheduled_jobs.config import load_config, ConfigError
from scheduled_jobs.startup import StartupError, initialize_all
from scheduled_jobs.startup.bootstrap import build_core_units, build_scheduler_dependent_units
from scheduled_jobs.utils import configure_logging, check_database_connectivity, close_database
from .entities.delivery_target import DeliveryTarget
from .entities.dispatch_report import DispatchReport
from .entities.notification_message import NotificationMessage
from .utils.dispatcher import NotificationDispatcher
from .utils.grouper import group_subscribers_by_feature, group_subscribers_by_symbol
from .utils.message_builder import MarketMessageService

logger = logging.getLogger(__name__)


def build_cron_trigger(spec: str, timezone: str) -> CronTrigger:
    """
    Build a trigger from a 5-field crontab or a 6-field spec with leading seconds.

    Raises:
        ValueError: If the spec has another number of fields or invalid values
    """
    fields = spec.split()
    if len(fields) == 5:
        return CronTrigger.from_crontab(spec, timezone=timezone)
    if len(fields) == 6:
        second, minute, hour, day, month, day_of_week = fields
        return CronTrigger(
            second=second,
            minute=minute,
            hour=hour,
            day=day,
            month=month,
            day_of_week=day_of_week,
            timezone=timezone,
        )
    raise ValueError(f"Cron spec must have 5 or 6 fields, got {len(fields)}: {spec!r}")


class SchedulerJobService:
    """The notification jobs; each run is self-contained and safe to repeat."""

    def __init__(self,
                 dispatcher: NotificationDispatcher,
                 message_service: MarketMessageService,
                 subscription_repo: SubscriptionRepository,
                 subscription_symbol_repo: SubscriptionSymbolRepository,
                 telegram_client: TelegramBotClient,
                 line_client: Optional[LineBotClient] = None):
        self.dispatcher = dispatcher
        self.message_service = message_service
        self.subscription_repo = subscription_repo
        self.subscription_symbol_repo = subscription_symbol_repo
        self.telegram_client = telegram_client
        self.line_client = line_client

    def send(self, target: DeliveryTarget, message: NotificationMessage) -> None:
        """Deliver a message on the target's platform."""
        if target.platform == ChatPlatform.TELEGRAM:
            self.telegram_client.send_message_with_keyboard(target.address, message.text, message.keyboard)
        elif target.platform == ChatPlatform.LINE:
            if self.line_client is None:
                raise RuntimeError("LINE client is not configured")
            self.line_client.push_message(target.address, message.plain_text)
        else:
            raise RuntimeError(f"Unsupported platform {target.platform}")

    def _notify_symbol_subscribers(self, job_name: str, feature: SubscriptionFeature,
                                   payload_fetcher) -> Optional[DispatchReport]:
        try:
            groups = group_subscribers_by_symbol(self.subscription_symbol_repo, feature)
        except Exception as e:
            logger.error(f"{job_name}: failed to load symbol subscriptions: {e}")
            return None

        if groups is None:
            return None

        report = self.dispatcher.dispatch(groups, payload_fetcher, self.send)
        logger.info(
            f"{job_name} complete: {len(groups)} symbols, {report.recipients} subscriptions, "
            f"{report.delivered} delivered, {report.send_failures} failed"
        )
        return report

    def _notify_feature_subscribers(self, job_name: str, feature: SubscriptionFeature,
                                    payload_fetcher) -> Optional[DispatchReport]:
        try:
            groups = group_subscribers_by_feature(self.subscription_repo, feature)
        except Exception as e:
            logger.error(f"{job_name}: failed to load subscriptions: {e}")
            return None

        if groups is None:
            return None

        report = self.dispatcher.dispatch(groups, payload_fetcher, self.send)
        logger.info(
            f"{job_name} complete: {report.recipients} subscriptions, "
            f"{report.delivered} delivered, {report.send_failures} failed"
        )
        return report

    def notify_stock_price(self) -> Optional[DispatchReport]:
        return self._notify_symbol_subscribers(
            "Stock price notification",
            SubscriptionFeature.STOCK_INFO,
            self.message_service.get_stock_price_message,
        )

    def notify_stock_news(self) -> Optional[DispatchReport]:
        return self._notify_symbol_subscribers(
            "Stock news notification",
            SubscriptionFeature.STOCK_NEWS,
            self.message_service.get_stock_news_message,
        )

    def notify_daily_market_info(self) -> Optional[DispatchReport]:
        return self._notify_feature_subscribers(
            "Daily market info notification",
            SubscriptionFeature.DAILY_MARKET_INFO,
            lambda _feature: self.message_service.get_daily_market_info_message(1),
        )

    def notify_top_volume_items(self) -> Optional[DispatchReport]:
        return self._notify_feature_subscribers(
            "Top volume notification",
            SubscriptionFeature.TOP_VOLUME_ITEMS,
            lambda _feature: self.message_service.get_top_volume_message(),
        )

    def jobs(self):
        """(job id, callable) pairs for scheduling."""
        return [
            ("notify_stock_price", self.notify_stock_price),
            ("notify_stock_news", self.notify_stock_news),
            ("notify_daily_market_info", self.notify_daily_market_info),
            ("notify_top_volume_items", self.notify_top_volume_items),
        ]

    def run_all(self) -> None:
        for job_id, job in self.jobs():
            try:
                job()
            except Exception as e:
                logger.error(f"Job {job_id} failed: {e}")


def main():
    """Start the notification scheduler."""
    try:
        config = load_config()
    except ConfigError as e:
        configure_logging()
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    configure_logging(config.log_level)

    try:
        trigger = build_cron_trigger(config.scheduler_stock_spec, config.scheduler_timezone)
    except Exception as e:
        logger.error(f"Invalid schedule {config.scheduler_stock_spec!r} ({config.scheduler_timezone}): {e}")
        sys.exit(1)
    logger.info(f"Scheduler timezone: {config.scheduler_timezone}")

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
            build_core_units(config, db_manager),
            timeout=config.init_timeout_seconds,
            dependent_units=build_scheduler_dependent_units(),
        )
    except StartupError as e:
        logger.error(f"Startup failed: {e}")
        close_database(db_manager)
        sys.exit(1)

    if not check_database_connectivity(db_manager, components["subscription_repo"]):
        logger.error("Cannot proceed without proper database setup.")
        close_database(db_manager)
        sys.exit(1)

    job_service: SchedulerJobService = components["scheduler_jobs"]

    scheduler = BlockingScheduler(timezone=config.scheduler_timezone)
    for job_id, job in job_service.jobs():
        scheduler.add_job(job, trigger, id=job_id, max_instances=1, coalesce=True)

    try:
        logger.info("Running all notifications once on startup")
        job_service.run_all()

        logger.info(f"Scheduler started with schedule {config.scheduler_stock_spec!r}")
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Shutting down scheduler")
    finally:
        close_database(db_manager)


if __name__ == "__main__":
    main()
