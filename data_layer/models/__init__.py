"""
Models package initialization.
"""

from .symbol import Symbol, Market
from .user import User, ChatPlatform
from .subscription import Subscription, SubscriptionSymbol, SubscriptionFeature

__all__ = [
    "Symbol",
    "Market",
    "User",
    "ChatPlatform",
    "Subscription",
    "SubscriptionSymbol",
    "SubscriptionFeature",
]
