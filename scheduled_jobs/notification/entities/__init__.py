from .notification_message import NotificationMessage
from .delivery_target import DeliveryTarget, resolve_delivery_target
from .dispatch_report import DispatchReport

__all__ = [
    'NotificationMessage',
    'DeliveryTarget',
    'resolve_delivery_target',
    'DispatchReport',
]
