"""
Notification center backends and delivery channels.
"""
from .center import LocalNotificationCenter, NotificationCenter
from .push import make_webhook_handler, send_delivery_webhook

__all__ = ["NotificationCenter", "LocalNotificationCenter", "make_webhook_handler", "send_delivery_webhook"]
