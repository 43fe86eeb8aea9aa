"""
Subscription repositories: feature subscriptions and their symbol join rows.
"""

import logging
from typing import List

from .base_repository import BaseRepository
from ..models.subscription import Subscription, SubscriptionSymbol
from ..database.connection_manager import DatabaseConnectionManager
from ..exceptions import ValidationError


class SubscriptionRepository(BaseRepository[Subscription]):
    """Read access to feature subscriptions."""

    SELECT_COLUMNS = "id, user_id, feature_id, status"

    def __init__(self, db_manager: DatabaseConnectionManager):
        super().__init__(db_manager)
        self.logger = logging.getLogger(__name__)
        self.table_name = "subscriptions"

    def get_by_feature_id(self, feature_id: int) -> List[Subscription]:
        """
        Retrieve the active subscriptions of one feature.

        Args:
            feature_id: Feature ID (see SubscriptionFeature)

        Returns:
            Active subscriptions, ordered by user

        Raises:
            DatabaseQueryError: If database operation fails
        """
        query = (
            f"SELECT {self.SELECT_COLUMNS} FROM subscriptions "
            "WHERE feature_id = %s AND status = TRUE "
            "ORDER BY user_id;"
        )
        return self._fetch_all(query, (int(feature_id),), "get subscriptions by feature", Subscription.from_db_row)


class SubscriptionSymbolRepository(BaseRepository[SubscriptionSymbol]):
    """
    Read access to subscription_symbols join rows.

    Rows are loaded with LEFT JOINs so a dangling symbol or subscription shows
    up as a None back-reference instead of silently disappearing.
    """

    ORDERABLE_COLUMNS = ("id", "subscription_id", "symbol_id")

    def __init__(self, db_manager: DatabaseConnectionManager):
        super().__init__(db_manager)
        self.logger = logging.getLogger(__name__)
        self.table_name = "subscription_symbols"

    def get_all(self, order_by: str = "subscription_id") -> List[SubscriptionSymbol]:
        """
        Retrieve every join row with its symbol and subscription resolved.

        Args:
            order_by: Join table column to order by

        Returns:
            Join rows; unresolved back-references are None

        Raises:
            ValidationError: If order_by is not an orderable column
            DatabaseQueryError: If database operation fails
        """
        if order_by not in self.ORDERABLE_COLUMNS:
            raise ValidationError("order_by", order_by, f"Must be one of {', '.join(self.ORDERABLE_COLUMNS)}")

        query = f"""
        SELECT ss.id, ss.subscription_id,
               sym.id, sym.symbol, sym.name, sym.market,
               sub.id, sub.user_id, sub.feature_id, sub.status
        FROM subscription_symbols ss
        LEFT JOIN symbols sym ON sym.id = ss.symbol_id
        LEFT JOIN subscriptions sub ON sub.id = ss.subscription_id AND sub.status = TRUE
        ORDER BY ss.{order_by};
        """
        return self._fetch_all(query, (), "get all subscription symbols", SubscriptionSymbol.from_db_row)
