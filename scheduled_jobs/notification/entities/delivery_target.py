"""
Entity class for a resolved delivery identity.
"""

from dataclasses import dataclass
from typing import Union

from data_layer import ChatPlatform, User, ValidationError


@dataclass(frozen=True)
class DeliveryTarget:
    """Where a notification for one user is sent."""
    platform: ChatPlatform
    address: Union[int, str]  # Telegram chat id or LINE user id


def resolve_delivery_target(user: User) -> DeliveryTarget:
    """
    Resolve the delivery identity of a user.

    Telegram chat ids must be integers (negative for groups); LINE user ids
    start with 'U'.

    Raises:
        ValidationError: If the account id is malformed for the user's platform
    """
    account_id = user.account_id
    if not account_id:
        raise ValidationError("account_id", account_id, f"User {user.id} has no account id")

    if user.platform == ChatPlatform.TELEGRAM:
        try:
            return DeliveryTarget(ChatPlatform.TELEGRAM, int(account_id))
        except ValueError:
            raise ValidationError("account_id", account_id, f"User {user.id} has a non-numeric Telegram chat id")

    if user.platform == ChatPlatform.LINE:
        if not account_id.startswith("U"):
            raise ValidationError("account_id", account_id, f"User {user.id} has a malformed LINE user id")
        return DeliveryTarget(ChatPlatform.LINE, account_id)

    raise ValidationError("platform", user.platform, f"User {user.id} has an unsupported platform")
