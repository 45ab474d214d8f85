"""
Notification Center: the host-side service that owns permission decisions,
pending one-shot requests and delivered notifications.

LocalNotificationCenter keeps one APScheduler job per pending request.
"""
import logging
from abc import ABC, abstractmethod
from collections import OrderedDict
from datetime import timedelta
from typing import Awaitable, Callable, Iterable, List, Optional

from apscheduler.jobstores.base import ConflictingIdError, JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from reminder_loop.errors import NotificationCenterError
from reminder_loop.schemas import (
    AuthorizationOption,
    AuthorizationStatus,
    DeliveredNotification,
    NotificationCategory,
    NotificationRequest,
    utcnow,
)
from reminder_loop.utils.json_logger import log_notification_event

logger = logging.getLogger("notification_center")

DeliveryHandler = Callable[[DeliveredNotification], Awaitable[None]]

_POLICY_DECISIONS = {
    "grant": AuthorizationStatus.authorized,
    "deny": AuthorizationStatus.denied,
    "provisional": AuthorizationStatus.provisional,
}


class NotificationCenter(ABC):
    """Abstract notification service the scheduler talks to."""

    @abstractmethod
    async def request_authorization(self, options: Iterable[AuthorizationOption]) -> bool:
        """Ask the user once; later calls return the existing decision."""
        raise NotImplementedError

    @abstractmethod
    async def get_authorization_status(self) -> AuthorizationStatus:
        raise NotImplementedError

    @abstractmethod
    async def add(self, request: NotificationRequest) -> None:
        """Register a pending request. Raises NotificationCenterError when rejected."""
        raise NotImplementedError

    @abstractmethod
    async def remove_all_pending(self) -> None:
        raise NotImplementedError

    @abstractmethod
    async def pending_requests(self) -> List[NotificationRequest]:
        raise NotImplementedError

    @abstractmethod
    async def delivered_notifications(self) -> List[DeliveredNotification]:
        raise NotImplementedError

    @abstractmethod
    async def remove_delivered(self, identifier: str) -> None:
        raise NotImplementedError

    async def get_delivered(self, identifier: str) -> Optional[DeliveredNotification]:
        for notification in await self.delivered_notifications():
            if notification.request.identifier == identifier:
                return notification
        return None

    @abstractmethod
    def set_notification_categories(self, categories: Iterable[NotificationCategory]) -> None:
        raise NotImplementedError


class LocalNotificationCenter(NotificationCenter):
    def __init__(
        self,
        permission_policy: str = "grant",
        max_pending: int = 64,
        delivered_limit: int = 50,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        if permission_policy not in _POLICY_DECISIONS:
            raise ValueError(f"Unknown permission policy: {permission_policy}")
        self.permission_policy = permission_policy
        self.max_pending = max_pending
        self.delivered_limit = delivered_limit
        self.categories: dict = {}
        self._status = AuthorizationStatus.not_determined
        self._scheduler = scheduler or AsyncIOScheduler(timezone="UTC")
        self._active = False
        self._delivered: "OrderedDict[str, DeliveredNotification]" = OrderedDict()
        self._handlers: List[DeliveryHandler] = []

    # -- lifecycle ------------------------------------------------------------

    def start(self) -> None:
        if self._active:
            logger.warning("Notification center already running")
            return
        self._scheduler.start()
        self._active = True
        logger.info("Notification center started")

    def shutdown(self) -> None:
        if not self._active:
            return
        # AsyncIOScheduler defers the actual stop to the next loop iteration
        self._active = False
        self._scheduler.shutdown(wait=False)
        logger.info("Notification center stopped")

    @property
    def running(self) -> bool:
        return self._active

    def add_delivery_handler(self, handler: DeliveryHandler) -> None:
        self._handlers.append(handler)

    # -- authorization --------------------------------------------------------

    async def request_authorization(self, options: Iterable[AuthorizationOption]) -> bool:
        if self._status == AuthorizationStatus.not_determined:
            self._status = _POLICY_DECISIONS[self.permission_policy]
            logger.info(
                "Authorization decided: %s (options=%s)",
                self._status.value,
                ",".join(sorted(o.value for o in options)),
            )
        return self._status.allows_delivery

    async def get_authorization_status(self) -> AuthorizationStatus:
        return self._status

    def change_authorization(self, status: AuthorizationStatus) -> None:
        """Mirror of the user flipping the switch in system settings."""
        logger.info("Authorization changed externally: %s -> %s", self._status.value, status.value)
        self._status = status

    # -- categories -----------------------------------------------------------

    def set_notification_categories(self, categories: Iterable[NotificationCategory]) -> None:
        self.categories = {c.identifier: c for c in categories}
        logger.info("Registered notification categories: %s", ", ".join(self.categories) or "none")

    # -- pending --------------------------------------------------------------

    async def add(self, request: NotificationRequest) -> None:
        if request.trigger.repeats:
            raise NotificationCenterError("Repeating triggers are not supported")

        pending = len(self._scheduler.get_jobs())
        if pending >= self.max_pending:
            raise NotificationCenterError(f"Pending notification limit reached ({self.max_pending})")

        run_date = utcnow() + timedelta(seconds=request.trigger.time_interval)
        try:
            self._scheduler.add_job(
                self._fire,
                trigger=DateTrigger(run_date=run_date),
                id=request.identifier,
                name=f"{request.content.category_identifier} in {request.trigger.time_interval}s",
                kwargs={"request": request},
                misfire_grace_time=None,
            )
        except ConflictingIdError as e:
            raise NotificationCenterError(f"Duplicate notification id {request.identifier}") from e

        logger.info("Pending notification %s fires in %ds", request.identifier, request.trigger.time_interval)
        log_notification_event("scheduled", request, pending=pending + 1)

    async def remove_all_pending(self) -> None:
        count = len(self._scheduler.get_jobs())
        self._scheduler.remove_all_jobs()
        logger.info("Removed %d pending notification(s)", count)
        log_notification_event("cancelled", removed=count)

    async def pending_requests(self) -> List[NotificationRequest]:
        return [job.kwargs["request"] for job in self._scheduler.get_jobs()]

    # -- delivery -------------------------------------------------------------

    async def _fire(self, request: NotificationRequest) -> None:
        """Job body: deliver one pending request."""
        try:
            self._scheduler.remove_job(request.identifier)
        except JobLookupError:
            pass  # date-triggered jobs are already gone once they run

        if not self._status.allows_delivery:
            logger.info("Dropped notification %s (authorization %s)", request.identifier, self._status.value)
            log_notification_event("dropped", request, authorization=self._status.value)
            return

        delivered = DeliveredNotification(request=request)
        self._delivered[request.identifier] = delivered
        while len(self._delivered) > self.delivered_limit:
            self._delivered.popitem(last=False)

        logger.info("Delivered notification %s", request.identifier)
        log_notification_event("delivered", request)

        for handler in list(self._handlers):
            try:
                await handler(delivered)
            except Exception as e:
                logger.error("Delivery handler failed for %s: %s", request.identifier, e)

    async def delivered_notifications(self) -> List[DeliveredNotification]:
        return list(self._delivered.values())

    async def get_delivered(self, identifier: str) -> Optional[DeliveredNotification]:
        return self._delivered.get(identifier)

    async def remove_delivered(self, identifier: str) -> None:
        self._delivered.pop(identifier, None)
