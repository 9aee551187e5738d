from .events import OrderEvent
from .dispatcher import DispatchingNotifier, Notifier, dispatch_order_event, get_notifier

__all__ = [
    "DispatchingNotifier",
    "Notifier",
    "OrderEvent",
    "dispatch_order_event",
    "get_notifier",
]
