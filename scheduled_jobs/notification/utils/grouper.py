"""
Groups subscribers by topic so each topic's payload is fetched only once.
"""

import logging
from typing import Dict, List, Optional

from data_layer import SubscriptionRepository, SubscriptionSymbolRepository

logger = logging.getLogger(__name__)


def group_subscribers_by_symbol(subscription_symbol_repo: SubscriptionSymbolRepository,
                                feature_id: Optional[int] = None) -> Optional[Dict[str, List[int]]]:
    """
    Group subscriber user ids by symbol code.

    Join rows whose symbol or subscription does not resolve are skipped, as
    are rows of other features when feature_id is given. A user subscribed to
    the same symbol through more than one row is listed once.

    Topics are keyed by the bare symbol code, so a TW and a US symbol sharing
    a code fall into one group and receive the same (Taiwan market) payload.

    Args:
        subscription_symbol_repo: Source of subscription/symbol join rows
        feature_id: Only keep subscriptions to this feature

    Returns:
        Mapping of symbol code to distinct user ids (first-seen order), or None
        when there are no join rows at all

    Raises:
        DatabaseQueryError: If the join rows cannot be loaded
    """
    rows = subscription_symbol_repo.get_all("subscription_id")
    if not rows:
        logger.info("No symbol subscriptions to notify")
        return None

    groups: Dict[str, List[int]] = {}
    filtered = 0
    for row in rows:
        if not row.is_resolved:
            logger.warning(f"Subscription symbol {row.id} is missing its symbol or subscription, skipping")
            continue
        if feature_id is not None and row.subscription.feature_id != feature_id:
            filtered += 1
            continue
        recipients = groups.setdefault(row.symbol.symbol, [])
        if row.subscription.user_id not in recipients:
            recipients.append(row.subscription.user_id)

    if filtered:
        logger.debug(f"Skipped {filtered} subscription symbols of other features")
    return groups


def group_subscribers_by_feature(subscription_repo: SubscriptionRepository,
                                 feature_id: int) -> Optional[Dict[int, List[int]]]:
    """
    Group the active subscribers of a market-wide feature under one topic.

    Returns:
        {feature_id: user ids}, or None when the feature has no subscribers

    Raises:
        DatabaseQueryError: If the subscriptions cannot be loaded
    """
    subscriptions = subscription_repo.get_by_feature_id(feature_id)
    if not subscriptions:
        logger.info(f"No subscribers for feature {feature_id}")
        return None

    return {int(feature_id): [subscription.user_id for subscription in subscriptions]}
