"""
User model representing a chat user who can receive notifications.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Any

from ..exceptions import ValidationError


class ChatPlatform(str, Enum):
    """Chat platform a user registered from."""
    TELEGRAM = "telegram"
    LINE = "line"


@dataclass
class User:
    """
    Represents a bot user.

    Attributes:
        id: Primary key
        account_id: Platform account identifier used as the delivery identity
            (Telegram chat id, LINE user id)
        platform: Chat platform the account belongs to
        name: Optional display name
        status: Whether the user is active
    """
    id: int
    account_id: str
    platform: ChatPlatform = ChatPlatform.TELEGRAM
    name: Optional[str] = None
    status: bool = True
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if self.id is None or self.id <= 0:
            raise ValidationError("id", self.id, "ID must be a positive integer")
        self.account_id = (self.account_id or "").strip()
        if not isinstance(self.platform, ChatPlatform):
            try:
                self.platform = ChatPlatform(str(self.platform).lower())
            except ValueError:
                raise ValidationError("platform", self.platform, "Unknown chat platform")

    @staticmethod
    def from_db_row(row: Any) -> 'User':
        """
        Create User instance from database row.

        Args:
            row: Database row tuple (id, account_id, platform, name, status, created_at)
        """
        return User(
            id=row[0],
            account_id=row[1],
            platform=row[2],
            name=row[3],
            status=row[4],
            created_at=row[5],
        )
