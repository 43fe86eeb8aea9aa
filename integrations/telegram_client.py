"""
Telegram Bot API client for outbound notifications.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import requests

from .exceptions import ChatDeliveryError, ClientConfigurationError, UpstreamAPIError

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"

# Telegram rejects messages longer than this
MAX_MESSAGE_LENGTH = 4096


@dataclass(frozen=True)
class LinkButton:
    """Inline keyboard button that opens a URL."""
    text: str
    url: str

    def to_dict(self) -> Dict[str, str]:
        return {'text': self.text, 'url': self.url}


def build_inline_keyboard(rows: Sequence[Sequence[LinkButton]]) -> Dict[str, Any]:
    """Telegram InlineKeyboardMarkup for rows of link buttons."""
    return {'inline_keyboard': [[button.to_dict() for button in row] for row in rows]}


def truncate_at_line(text: str, limit: int) -> str:
    """Cut text to at most limit characters, ending on a whole line when one fits."""
    if len(text) <= limit:
        return text
    cut = text.rfind("\n", 0, limit + 1)
    return text[:cut] if cut > 0 else text[:limit]


class TelegramBotClient:
    """
    Sends messages through the Telegram Bot API.

    Safe to share between threads: every call is an independent HTTPS request.
    """

    def __init__(self, token: str, timeout: float = 15, session: Optional[requests.Session] = None):
        if not token:
            raise ClientConfigurationError("TELEGRAM_BOT_TOKEN is not set")
        self._token = token
        self.timeout = timeout
        self.session = session or requests.Session()
        self.username: Optional[str] = None

    @classmethod
    def connect(cls, token: str, **kwargs) -> 'TelegramBotClient':
        """Create a client and verify the token with getMe."""
        client = cls(token, **kwargs)
        me = client.get_me()
        client.username = me.get('username')
        logger.info(f"Authorized on Telegram account @{client.username}")
        return client

    def _call(self, method: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{TELEGRAM_API_URL}/bot{self._token}/{method}"
        response = self.session.post(url, json=payload or {}, timeout=self.timeout)
        try:
            body = response.json()
        except ValueError:
            body = {'ok': False, 'description': response.reason or 'invalid JSON response'}
        if not body.get('ok'):
            raise RuntimeError(body.get('description') or f"HTTP {response.status_code}")
        return body.get('result')

    def get_me(self) -> Dict[str, Any]:
        """
        Raises:
            UpstreamAPIError: If the token is rejected or Telegram is unreachable
        """
        try:
            return self._call("getMe") or {}
        except (requests.exceptions.RequestException, RuntimeError) as e:
            raise UpstreamAPIError("Telegram", str(e))

    def send_message(self, chat_id: int, text: str, reply_markup: Optional[Dict[str, Any]] = None) -> None:
        """
        Send a text message.

        Raises:
            ChatDeliveryError: If Telegram does not accept the message
        """
        if len(text) > MAX_MESSAGE_LENGTH:
            logger.warning(f"Truncating message for chat {chat_id} from {len(text)} characters")
            text = truncate_at_line(text, MAX_MESSAGE_LENGTH)

        payload: Dict[str, Any] = {
            'chat_id': chat_id,
            'text': text,
            'parse_mode': 'HTML',
            'disable_web_page_preview': True,
        }
        if reply_markup is not None:
            payload['reply_markup'] = reply_markup

        try:
            self._call("sendMessage", payload)
        except (requests.exceptions.RequestException, RuntimeError) as e:
            raise ChatDeliveryError("telegram", chat_id, str(e))

    def send_message_with_keyboard(self, chat_id: int, text: str,
                                   keyboard: Optional[List[List[LinkButton]]]) -> None:
        """Send a text message with an inline link keyboard (plain message when keyboard is empty)."""
        if not keyboard:
            self.send_message(chat_id, text)
            return
        self.send_message(chat_id, text, reply_markup=build_inline_keyboard(keyboard))
