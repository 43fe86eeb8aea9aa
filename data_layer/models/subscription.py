"""
Subscription models: a user's subscription to a feature, and the join record
linking a subscription to the symbols it follows.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Any

from .symbol import Symbol, Market


class SubscriptionFeature(IntEnum):
    """Subscribable notification features (the feature table ids)."""
    STOCK_INFO = 1
    STOCK_NEWS = 2
    DAILY_MARKET_INFO = 3
    TOP_VOLUME_ITEMS = 4


@dataclass(frozen=True)
class Subscription:
    """
    A user's subscription to one feature.

    Attributes:
        id: Primary key
        user_id: Subscribed user
        feature_id: Subscribed feature (see SubscriptionFeature)
        status: Whether the subscription is active
    """
    id: int
    user_id: int
    feature_id: int
    status: bool = True

    @staticmethod
    def from_db_row(row: Any) -> 'Subscription':
        """Create Subscription from a row (id, user_id, feature_id, status)."""
        return Subscription(id=row[0], user_id=row[1], feature_id=row[2], status=row[3])


@dataclass(frozen=True)
class SubscriptionSymbol:
    """
    Join record between a subscription and a symbol.

    Both back-references are nullable foreign keys: a row whose subscription or
    symbol no longer resolves carries None and is not eligible for notification.
    """
    id: int
    subscription_id: int
    symbol: Optional[Symbol] = None
    subscription: Optional[Subscription] = None

    @property
    def is_resolved(self) -> bool:
        return self.symbol is not None and self.subscription is not None

    @staticmethod
    def from_db_row(row: Any) -> 'SubscriptionSymbol':
        """
        Create SubscriptionSymbol from a LEFT JOIN row.

        Args:
            row: (id, subscription_id,
                  symbol_id, symbol, symbol_name, market,
                  subscription_pk, user_id, feature_id, status)
        """
        symbol = None
        if row[2] is not None:
            symbol = Symbol(id=row[2], symbol=row[3], name=row[4], market=Market(row[5]))

        subscription = None
        if row[6] is not None:
            subscription = Subscription(id=row[6], user_id=row[7], feature_id=row[8], status=row[9])

        return SubscriptionSymbol(
            id=row[0],
            subscription_id=row[1],
            symbol=symbol,
            subscription=subscription,
        )
