"""
Main Surface: delay picker, permission prompt and the schedule button.
"""
import asyncio
import logging
from typing import Optional

from reminder_loop.config import Settings, get_settings
from reminder_loop.errors import SchedulingError
from reminder_loop.picker import DelayPicker
from reminder_loop.schemas import (
    AuthorizationStatus,
    ConfirmOutcome,
    MainSurfaceView,
    PermissionHint,
    SurfacePhase,
)
from reminder_loop.services.scheduler import NotificationScheduler

logger = logging.getLogger("main_surface")


class MainSurface:
    def __init__(self, scheduler: NotificationScheduler, settings: Optional[Settings] = None):
        self.scheduler = scheduler
        self.settings = settings or get_settings()
        self.picker = DelayPicker()
        self.phase = SurfacePhase.idle
        self._feedback_task: Optional[asyncio.Task] = None

    @property
    def authorization_status(self) -> AuthorizationStatus:
        return self.scheduler.authorization_status

    @property
    def can_confirm(self) -> bool:
        return self.phase != SurfacePhase.scheduling and self.authorization_status != AuthorizationStatus.denied

    def permission_hint(self) -> PermissionHint:
        status = self.authorization_status
        if status == AuthorizationStatus.not_determined:
            return PermissionHint.request_permission
        if status == AuthorizationStatus.denied:
            return PermissionHint.open_settings
        return PermissionHint.enabled

    def view(self) -> MainSurfaceView:
        return MainSurfaceView(
            selected_seconds=self.picker.value,
            phase=self.phase,
            authorization_status=self.authorization_status,
            can_confirm=self.can_confirm,
            permission_hint=self.permission_hint(),
        )

    # -- lifecycle ------------------------------------------------------------

    async def on_launch(self) -> None:
        await self.scheduler.refresh_authorization_status()

    async def on_foreground(self) -> None:
        await self.scheduler.refresh_authorization_status()

    # -- actions --------------------------------------------------------------

    def drag(self, raw_seconds: float) -> int:
        return self.picker.drag(raw_seconds)

    async def request_permission(self) -> bool:
        return await self.scheduler.request_authorization()

    async def confirm(self) -> ConfirmOutcome:
        if self.phase == SurfacePhase.scheduling:
            return ConfirmOutcome.busy
        if self.authorization_status == AuthorizationStatus.denied:
            logger.debug("Confirm ignored: notifications denied")
            return ConfirmOutcome.disabled

        self._cancel_feedback()
        self.phase = SurfacePhase.scheduling
        delay = self.picker.value

        try:
            if self.authorization_status == AuthorizationStatus.not_determined:
                granted = await self.scheduler.request_authorization()
                if not granted:
                    self.phase = SurfacePhase.idle
                    return ConfirmOutcome.not_authorized

            await self.scheduler.schedule_one_shot(delay)
        except SchedulingError as e:
            logger.warning("Reminder not scheduled: %s", e)
            self.phase = SurfacePhase.idle
            return ConfirmOutcome.failed
        except Exception as e:
            logger.error("Confirm failed unexpectedly: %s", e)
            self.phase = SurfacePhase.idle
            return ConfirmOutcome.failed

        self.phase = SurfacePhase.scheduled
        self._feedback_task = asyncio.create_task(self._revert_after_feedback())
        return ConfirmOutcome.scheduled

    async def _revert_after_feedback(self) -> None:
        await asyncio.sleep(self.settings.success_feedback_seconds)
        if self.phase == SurfacePhase.scheduled:
            self.phase = SurfacePhase.idle

    def _cancel_feedback(self) -> None:
        if self._feedback_task is not None and not self._feedback_task.done():
            self._feedback_task.cancel()
        self._feedback_task = None

    async def close(self) -> None:
        self._cancel_feedback()
