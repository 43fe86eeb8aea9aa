"""
Fan-out of topic payloads to subscribers.
"""

import logging
from typing import Callable, Hashable, List, Mapping, Optional

from data_layer import User, UserRepository
from ..entities.delivery_target import DeliveryTarget, resolve_delivery_target
from ..entities.dispatch_report import DispatchReport
from ..entities.notification_message import NotificationMessage

logger = logging.getLogger(__name__)

PayloadFetcher = Callable[[Hashable], Optional[NotificationMessage]]
SendFunc = Callable[[DeliveryTarget, NotificationMessage], None]
IdentityResolver = Callable[[User], DeliveryTarget]


class NotificationDispatcher:
    """
    Sends one payload per topic to every subscriber of that topic.

    Failures are contained at the smallest unit: a failed payload fetch skips
    its topic, and a missing user, malformed identity or failed send skips
    only that recipient. dispatch() never raises.
    """

    def __init__(self, user_repo: UserRepository,
                 identity_resolver: IdentityResolver = resolve_delivery_target):
        self.user_repo = user_repo
        self.identity_resolver = identity_resolver

    def dispatch(self,
                 topic_groups: Mapping[Hashable, List[int]],
                 payload_fetcher: PayloadFetcher,
                 send_func: SendFunc) -> DispatchReport:
        report = DispatchReport()

        for topic, user_ids in topic_groups.items():
            report.topics += 1
            report.recipients += len(user_ids)

            try:
                payload = payload_fetcher(topic)
            except Exception as e:
                logger.error(f"Failed to build payload for {topic}: {e}")
                report.topics_failed += 1
                continue

            if not payload:
                logger.warning(f"Empty payload for {topic}, skipping {len(user_ids)} subscribers")
                report.topics_failed += 1
                continue

            for user_id in user_ids:
                target = self._resolve_target(user_id)
                if target is None:
                    report.skipped_recipients += 1
                    continue

                report.attempted += 1
                try:
                    send_func(target, payload)
                    report.delivered += 1
                except Exception as e:
                    report.send_failures += 1
                    logger.error(f"Failed to notify user {user_id} about {topic}: {e}")

        return report

    def _resolve_target(self, user_id: int) -> Optional[DeliveryTarget]:
        try:
            user = self.user_repo.get_by_id(user_id)
        except Exception as e:
            logger.error(f"Failed to load user {user_id}: {e}")
            return None

        if user is None:
            logger.error(f"User {user_id} not found")
            return None

        try:
            return self.identity_resolver(user)
        except Exception as e:
            logger.error(f"Cannot resolve delivery target for user {user_id}: {e}")
            return None
