"""
LINE Messaging API client for outbound push notifications.
"""

import logging
from typing import Optional

import requests

from .exceptions import ChatDeliveryError, ClientConfigurationError

logger = logging.getLogger(__name__)

LINE_PUSH_URL = "https://api.line.me/v2/bot/message/push"

# LINE text message limit
MAX_TEXT_LENGTH = 5000


class LineBotClient:
    """Pushes text messages to LINE users."""

    def __init__(self, channel_secret: str, channel_access_token: str, timeout: float = 15,
                 session: Optional[requests.Session] = None):
        if not channel_secret or not channel_access_token:
            raise ClientConfigurationError("CHANNEL_SECRET and CHANNEL_ACCESS_TOKEN must both be set")
        self.channel_secret = channel_secret
        self._access_token = channel_access_token
        self.timeout = timeout
        self.session = session or requests.Session()

    def push_message(self, user_id: str, text: str) -> None:
        """
        Push a text message to a user.

        Raises:
            ChatDeliveryError: If LINE does not accept the message
        """
        if len(text) > MAX_TEXT_LENGTH:
            logger.warning(f"Truncating LINE message for {user_id} from {len(text)} characters")
            text = text[:MAX_TEXT_LENGTH]

        headers = {'Authorization': f"Bearer {self._access_token}"}
        payload = {'to': user_id, 'messages': [{'type': 'text', 'text': text}]}

        try:
            response = self.session.post(LINE_PUSH_URL, json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            detail = e.response.text if e.response is not None else str(e)
            raise ChatDeliveryError("line", user_id, detail)
        except requests.exceptions.RequestException as e:
            raise ChatDeliveryError("line", user_id, str(e))
