"""
Custom exceptions for the upstream data providers and chat platforms.
"""

from typing import Optional


class IntegrationError(Exception):
    """Base exception for all integration errors."""
    pass


class UpstreamAPIError(IntegrationError):
    """Raised when a data provider cannot be reached or returns an unreadable response."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None):
        self.provider = provider
        self.status_code = status_code
        status_part = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"{provider} request failed{status_part}: {message}")


class ChatDeliveryError(IntegrationError):
    """Raised when a chat platform rejects or fails to deliver a message."""

    def __init__(self, platform: str, recipient, message: str):
        self.platform = platform
        self.recipient = recipient
        super().__init__(f"Failed to deliver {platform} message to {recipient}: {message}")


class ClientConfigurationError(IntegrationError):
    """Raised when a client is constructed without the credentials it needs."""
    pass
