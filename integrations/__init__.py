"""
Integrations package: upstream market data providers and chat platforms.
"""

from .exceptions import (
    IntegrationError,
    UpstreamAPIError,
    ChatDeliveryError,
    ClientConfigurationError,
)
from .finmind_client import FinMindClient, FinMindResponse
from .twse_client import TwseClient, DailyMarketInfo, VolumeRankItem
from .telegram_client import TelegramBotClient, LinkButton
from .line_client import LineBotClient

__all__ = [
    "IntegrationError",
    "UpstreamAPIError",
    "ChatDeliveryError",
    "ClientConfigurationError",
    "FinMindClient",
    "FinMindResponse",
    "TwseClient",
    "DailyMarketInfo",
    "VolumeRankItem",
    "TelegramBotClient",
    "LinkButton",
    "LineBotClient",
]
