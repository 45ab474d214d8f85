import logging
from typing import Any, Dict, Optional

import httpx

from reminder_loop.schemas import DeliveredNotification

logger = logging.getLogger("notification_push")


async def send_delivery_webhook(
    push_url: str,
    notification: DeliveredNotification,
    token: Optional[str] = None,
    *,
    timeout: float = 10,
) -> None:
    """POST a delivered notification to an external webhook."""
    if not push_url:
        return

    headers = {"Content-Type": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"

    payload = _delivery_payload(notification)

    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.post(push_url, json=payload, headers=headers)
            resp.raise_for_status()
            logger.info("Delivery webhook sent for %s (%s)", notification.request.identifier, resp.status_code)
    except httpx.HTTPStatusError as e:
        logger.warning("Delivery webhook rejected (%s) for %s", e.response.status_code, notification.request.identifier)
        raise
    except Exception as e:
        logger.error("Delivery webhook error: %s", e)
        raise


def make_webhook_handler(push_url: str, token: Optional[str] = None):
    """Bind a webhook URL into a notification-center delivery handler."""

    async def _handler(notification: DeliveredNotification) -> None:
        await send_delivery_webhook(push_url, notification, token)

    return _handler


def _delivery_payload(notification: DeliveredNotification) -> Dict[str, Any]:
    request = notification.request
    return {
        "id": request.identifier,
        "title": request.content.title,
        "body": request.content.body,
        "sound": request.content.sound,
        "categoryIdentifier": request.content.category_identifier,
        "userInfo": dict(request.content.user_info),
        "deliveredAt": notification.delivered_at.isoformat().replace("+00:00", "Z"),
    }
