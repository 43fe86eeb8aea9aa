"""
Entity class for a notification payload.
"""

from dataclasses import dataclass
from typing import List, Optional

from integrations import LinkButton


@dataclass(frozen=True)
class NotificationMessage:
    """
    Payload computed once per topic and sent to every subscriber of that topic.

    Attributes:
        text: Message body (Telegram HTML subset)
        keyboard: Optional rows of link buttons, rendered where the platform supports them
    """
    text: str
    keyboard: Optional[List[List[LinkButton]]] = None

    def __bool__(self) -> bool:
        return bool(self.text and self.text.strip())

    @property
    def plain_text(self) -> str:
        """Text with the keyboard links appended, for platforms without inline keyboards."""
        if not self.keyboard:
            return self.text
        links = [f"{button.text}\n{button.url}" for row in self.keyboard for button in row]
        return "\n\n".join([self.text] + links)
