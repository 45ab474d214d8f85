"""
Notification Scheduler: permission tracking and one-shot reminder registration.
"""
import logging
import uuid
from typing import List, Optional

from reminder_loop.config import Settings, get_settings
from reminder_loop.errors import InvalidDelayError, NotificationCenterError, SchedulingError
from reminder_loop.notifications.center import NotificationCenter
from reminder_loop.picker import is_valid_delay
from reminder_loop.schemas import (
    CONFIRM_ACTION_ID,
    MAX_DELAY_SECONDS,
    MIN_DELAY_SECONDS,
    PAYLOAD_SECONDS_KEY,
    TIMER_CATEGORY_ID,
    AuthorizationOption,
    AuthorizationStatus,
    NotificationAction,
    NotificationCategory,
    NotificationContent,
    NotificationRequest,
    TimeIntervalTrigger,
)
from reminder_loop.services.shared_store import SharedStore, StoreField

logger = logging.getLogger("scheduler")

AUTHORIZATION_OPTIONS = (AuthorizationOption.alert, AuthorizationOption.sound, AuthorizationOption.badge)


class NotificationScheduler:
    def __init__(self, center: NotificationCenter, store: SharedStore, settings: Optional[Settings] = None):
        self.center = center
        self.store = store
        self.settings = settings or get_settings()
        self.authorization_status = AuthorizationStatus.not_determined

    async def request_authorization(self) -> bool:
        """Prompt once for alert/sound/badge. Denial only shows up in authorization_status."""
        try:
            granted = await self.center.request_authorization(AUTHORIZATION_OPTIONS)
        except Exception as e:
            logger.warning("Authorization request failed: %s", e)
            granted = False
        try:
            await self.refresh_authorization_status()
        except Exception as e:
            logger.warning("Authorization status unavailable: %s", e)
            return False
        return granted

    async def refresh_authorization_status(self) -> AuthorizationStatus:
        """Re-read the decision; settings may have changed while the app was away."""
        status = await self.center.get_authorization_status()
        if status != self.authorization_status:
            logger.info("Authorization status: %s -> %s", self.authorization_status.value, status.value)
        self.authorization_status = status
        return status

    def register_category(self) -> None:
        confirm = NotificationAction(identifier=CONFIRM_ACTION_ID, title="Confirm", foreground=True)
        self.center.set_notification_categories(
            [NotificationCategory(identifier=TIMER_CATEGORY_ID, actions=[confirm])]
        )

    def build_request(self, delay_seconds: int) -> NotificationRequest:
        content = NotificationContent(
            title=self.settings.notification_title,
            body=self.settings.notification_body,
            sound="default",
            category_identifier=TIMER_CATEGORY_ID,
            user_info={PAYLOAD_SECONDS_KEY: delay_seconds},
        )
        return NotificationRequest(
            identifier=str(uuid.uuid4()),
            content=content,
            trigger=TimeIntervalTrigger(time_interval=delay_seconds, repeats=False),
        )

    async def schedule_one_shot(self, delay_seconds: int) -> NotificationRequest:
        """Register a one-shot reminder and record it as lastScheduledSeconds.

        Earlier pending reminders are left in place, so repeated calls stack
        independent timers. Raises SchedulingError when the center rejects
        the request.
        """
        if not is_valid_delay(delay_seconds):
            raise InvalidDelayError(
                f"Delay must be an integer in [{MIN_DELAY_SECONDS}, {MAX_DELAY_SECONDS}], got {delay_seconds!r}"
            )

        request = self.build_request(delay_seconds)
        try:
            await self.center.add(request)
        except NotificationCenterError as e:
            logger.error("Scheduling %ds reminder failed: %s", delay_seconds, e)
            raise SchedulingError(delay_seconds, str(e)) from e

        await self.store.set(StoreField.LAST_SCHEDULED_SECONDS, delay_seconds)
        logger.info("Scheduled reminder %s in %ds", request.identifier, delay_seconds)
        return request

    async def cancel_all(self) -> None:
        await self.center.remove_all_pending()

    async def pending(self) -> List[NotificationRequest]:
        return await self.center.pending_requests()
