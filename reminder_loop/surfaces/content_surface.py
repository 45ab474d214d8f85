"""
Content Surface: the expanded view of a delivered reminder.

It pre-fills the picker from the delivered payload, stages the chosen delay
as nextReminderSeconds, arms the next one-shot reminder and dismisses itself.
Authorization is assumed: the notification could not have been delivered
otherwise.
"""
import logging
from typing import Awaitable, Callable, Optional

from pydantic import ValidationError

from reminder_loop.errors import SchedulingError
from reminder_loop.picker import DelayPicker
from reminder_loop.schemas import (
    DEFAULT_DELAY_SECONDS,
    ConfirmOutcome,
    ContentSurfaceView,
    DeliveredNotification,
    ReminderPayload,
)
from reminder_loop.services.scheduler import NotificationScheduler
from reminder_loop.services.shared_store import SharedStore, StoreField

logger = logging.getLogger("content_surface")

DismissHook = Callable[[str], Awaitable[None]]


def read_payload(notification: DeliveredNotification) -> Optional[ReminderPayload]:
    """Validate the delivered user_info; None when absent or malformed."""
    try:
        return ReminderPayload.model_validate(notification.request.content.user_info)
    except ValidationError as e:
        logger.warning("Ignoring payload of %s: %s", notification.request.identifier, e.errors())
        return None


class ContentSurface:
    def __init__(
        self,
        scheduler: NotificationScheduler,
        store: SharedStore,
        on_dismiss: Optional[DismissHook] = None,
    ):
        self.scheduler = scheduler
        self.store = store
        self.on_dismiss = on_dismiss
        self.picker = DelayPicker()
        self.notification: Optional[DeliveredNotification] = None
        self.dismissed = False

    def did_receive(self, notification: DeliveredNotification) -> int:
        self.notification = notification
        payload = read_payload(notification)
        self.picker.drag(payload.scheduled_seconds if payload else DEFAULT_DELAY_SECONDS)
        return self.picker.value

    def drag(self, raw_seconds: float) -> int:
        return self.picker.drag(raw_seconds)

    def view(self) -> ContentSurfaceView:
        return ContentSurfaceView(
            notification_id=self.notification.request.identifier if self.notification else "",
            selected_seconds=self.picker.value,
            dismissed=self.dismissed,
        )

    async def confirm(self) -> ConfirmOutcome:
        selected = self.picker.value
        await self.store.set(StoreField.NEXT_REMINDER_SECONDS, selected)

        outcome = ConfirmOutcome.scheduled
        try:
            await self.scheduler.schedule_one_shot(selected)
        except SchedulingError as e:
            logger.error("Failed to schedule next reminder: %s", e)
            outcome = ConfirmOutcome.failed

        await self._dismiss()
        return outcome

    async def _dismiss(self) -> None:
        self.dismissed = True
        if self.on_dismiss is not None and self.notification is not None:
            await self.on_dismiss(self.notification.request.identifier)
