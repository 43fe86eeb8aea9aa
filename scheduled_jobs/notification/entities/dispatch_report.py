"""
Entity class for the counters of one notification dispatch.
"""

from dataclasses import dataclass
from typing import Dict


@dataclass
class DispatchReport:
    """Counters collected while fanning payloads out to subscribers."""
    topics: int = 0
    topics_failed: int = 0  # payload fetch failed or was empty
    recipients: int = 0  # subscriber ids across all topics
    attempted: int = 0  # sends attempted
    delivered: int = 0
    skipped_recipients: int = 0  # missing user or malformed delivery identity
    send_failures: int = 0

    def get_stats(self) -> Dict[str, int]:
        return {
            'topics': self.topics,
            'topics_failed': self.topics_failed,
            'recipients': self.recipients,
            'attempted': self.attempted,
            'delivered': self.delivered,
            'skipped_recipients': self.skipped_recipients,
            'send_failures': self.send_failures,
        }
