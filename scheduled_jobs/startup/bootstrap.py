"""
Init units for the scheduled job processes.

Configuration and the connection pool are created before the concurrent
phase because every unit depends on them.
"""

import logging
from typing import List, Optional

from data_layer import (
    DatabaseConnectionManager,
    SymbolsRepository,
    UserRepository,
    SubscriptionRepository,
    SubscriptionSymbolRepository,
)
from integrations import FinMindClient, LineBotClient, TelegramBotClient, TwseClient
from scheduled_jobs.config import Config
from .init_orchestrator import DependentInitUnit, InitUnit

logger = logging.getLogger(__name__)


def _build_line_client(config: Config) -> Optional[LineBotClient]:
    if not config.line_enabled:
        logger.warning("CHANNEL_SECRET/CHANNEL_ACCESS_TOKEN not set; LINE notifications disabled")
        return None
    return LineBotClient(config.channel_secret, config.channel_access_token)


def build_core_units(config: Config, db_manager: DatabaseConnectionManager) -> List[InitUnit]:
    """Independent repositories and clients used by the notification scheduler."""
    return [
        InitUnit("symbols_repo", lambda: SymbolsRepository(db_manager)),
        InitUnit("user_repo", lambda: UserRepository(db_manager)),
        InitUnit("subscription_repo", lambda: SubscriptionRepository(db_manager)),
        InitUnit("subscription_symbol_repo", lambda: SubscriptionSymbolRepository(db_manager)),
        InitUnit("finmind_client", lambda: FinMindClient(config.finmind_api_token)),
        InitUnit("twse_client", lambda: TwseClient()),
        InitUnit("telegram_client", lambda: TelegramBotClient.connect(config.telegram_bot_token)),
        InitUnit("line_client", lambda: _build_line_client(config)),
    ]


def build_scheduler_dependent_units() -> List[DependentInitUnit]:
    """Services wired from the core handles, in construction order."""
    # Imported here: the entry point modules import this one
    from scheduled_jobs.notification.notification_jobs import SchedulerJobService
    from scheduled_jobs.notification.utils import MarketMessageService, NotificationDispatcher

    return [
        DependentInitUnit(
            "market_message_service",
            lambda handles: MarketMessageService(
                handles["finmind_client"], handles["twse_client"], handles["symbols_repo"]
            ),
            requires=("finmind_client", "twse_client", "symbols_repo"),
        ),
        DependentInitUnit(
            "notification_dispatcher",
            lambda handles: NotificationDispatcher(handles["user_repo"]),
            requires=("user_repo",),
        ),
        DependentInitUnit(
            "scheduler_jobs",
            lambda handles: SchedulerJobService(
                dispatcher=handles["notification_dispatcher"],
                message_service=handles["market_message_service"],
                subscription_repo=handles["subscription_repo"],
                subscription_symbol_repo=handles["subscription_symbol_repo"],
                telegram_client=handles["telegram_client"],
                line_client=handles["line_client"],
            ),
            requires=(
                "notification_dispatcher",
                "market_message_service",
                "subscription_repo",
                "subscription_symbol_repo",
                "telegram_client",
                "line_client",
            ),
        ),
    ]


def build_sync_units(config: Config, db_manager: DatabaseConnectionManager) -> List[InitUnit]:
    """Independent components used by the symbol sync process."""
    return [
        InitUnit("symbols_repo", lambda: SymbolsRepository(db_manager)),
        InitUnit("finmind_client", lambda: FinMindClient(config.finmind_api_token)),
    ]


def build_sync_dependent_units() -> List[DependentInitUnit]:
    from scheduled_jobs.symbols_table.sync_symbols_table import SymbolSyncService

    return [
        DependentInitUnit(
            "symbol_sync_service",
            lambda handles: SymbolSyncService(handles["symbols_repo"], handles["finmind_client"]),
            requires=("symbols_repo", "finmind_client"),
        ),
    ]
