"""
Data Layer Package for the stock bot.

This package provides the data access layer shared by the scheduled jobs:
database connection pooling, catalog/user/subscription models, and the
repositories used by the symbol sync engine and the notification jobs.
"""

from .models import (
    Symbol,
    Market,
    User,
    ChatPlatform,
    Subscription,
    SubscriptionSymbol,
    SubscriptionFeature,
)
from .repositories import (
    SymbolsRepository,
    UserRepository,
    SubscriptionRepository,
    SubscriptionSymbolRepository,
)
from .database.connection_manager import DatabaseConnectionManager
from .exceptions import (
    DataLayerError,
    DatabaseConnectionError,
    DatabaseQueryError,
    ValidationError
)

__version__ = "1.0.0"
__all__ = [
    "Symbol",
    "Market",
    "User",
    "ChatPlatform",
    "Subscription",
    "SubscriptionSymbol",
    "SubscriptionFeature",
    "SymbolsRepository",
    "UserRepository",
    "SubscriptionRepository",
    "SubscriptionSymbolRepository",
    "DatabaseConnectionManager",
    "DataLayerError",
    "DatabaseConnectionError",
    "DatabaseQueryError",
    "ValidationError",
]
