"""
Repositories package initialization.
"""

from .base_repository import BaseRepository
from .symbols_repository import SymbolsRepository
from .user_repository import UserRepository
from .subscription_repository import SubscriptionRepository, SubscriptionSymbolRepository

__all__ = [
    "BaseRepository",
    "SymbolsRepository",
    "UserRepository",
    "SubscriptionRepository",
    "SubscriptionSymbolRepository",
]
