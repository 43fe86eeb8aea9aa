"""
Utils package for notification jobs.
"""

from .grouper import group_subscribers_by_symbol, group_subscribers_by_feature
from .dispatcher import NotificationDispatcher
from .message_builder import MarketMessageService

__all__ = [
    'group_subscribers_by_symbol',
    'group_subscribers_by_feature',
    'NotificationDispatcher',
    'MarketMessageService',
]
