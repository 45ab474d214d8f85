"""
Tests for the main surface and the notification content surface
"""
import asyncio
from unittest.mock import AsyncMock

import pytest

from reminder_loop.errors import SchedulingError
from reminder_loop.notifications import LocalNotificationCenter
from reminder_loop.schemas import (
    AuthorizationStatus,
    ConfirmOutcome,
    DeliveredNotification,
    NotificationContent,
    NotificationRequest,
    PermissionHint,
    SurfacePhase,
    TimeIntervalTrigger,
)
from reminder_loop.services.scheduler import NotificationScheduler
from reminder_loop.services.shared_store import StoreField
from reminder_loop.surfaces import ContentSurface, MainSurface


def delivered_with(user_info) -> DeliveredNotification:
    request = NotificationRequest(
        identifier="delivered-1",
        content=NotificationContent(title="t", body="b", user_info=user_info),
        trigger=TimeIntervalTrigger(time_interval=120),
    )
    return DeliveredNotification(request=request)


class TestMainSurface:
    @pytest.mark.asyncio
    async def test_fresh_install_confirm_at_sixty(self, scheduler, center, store, settings):
        """Not determined -> permission granted -> 60s reminder recorded."""
        surface = MainSurface(scheduler, settings)
        await surface.on_launch()
        assert surface.authorization_status == AuthorizationStatus.not_determined
        assert surface.permission_hint() == PermissionHint.request_permission

        outcome = await surface.confirm()

        assert outcome == ConfirmOutcome.scheduled
        assert surface.authorization_status == AuthorizationStatus.authorized
        assert surface.phase == SurfacePhase.scheduled
        assert await store.get(StoreField.LAST_SCHEDULED_SECONDS) == 60
        pending = await center.pending_requests()
        assert [r.trigger.time_interval for r in pending] == [60]
        await surface.close()

    @pytest.mark.asyncio
    async def test_success_feedback_reverts_to_idle(self, scheduler, settings):
        surface = MainSurface(scheduler, settings)
        await surface.confirm()
        assert surface.phase == SurfacePhase.scheduled
        await asyncio.sleep(settings.success_feedback_seconds + 0.1)
        assert surface.phase == SurfacePhase.idle

    @pytest.mark.asyncio
    async def test_denied_disables_confirm(self, store, settings):
        center = LocalNotificationCenter(permission_policy="deny")
        scheduler = NotificationScheduler(center, store, settings)
        await scheduler.request_authorization()
        scheduler.schedule_one_shot = AsyncMock()

        surface = MainSurface(scheduler, settings)
        assert surface.can_confirm is False
        assert surface.permission_hint() == PermissionHint.open_settings

        assert await surface.confirm() == ConfirmOutcome.disabled
        scheduler.schedule_one_shot.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_permission_refused_during_confirm(self, store, settings):
        center = LocalNotificationCenter(permission_policy="deny")
        scheduler = NotificationScheduler(center, store, settings)
        surface = MainSurface(scheduler, settings)

        assert await surface.confirm() == ConfirmOutcome.not_authorized
        assert surface.phase == SurfacePhase.idle
        assert await center.pending_requests() == []
        assert await store.get(StoreField.LAST_SCHEDULED_SECONDS) == 60

    @pytest.mark.asyncio
    async def test_scheduling_failure_returns_to_idle(self, scheduler, settings):
        await scheduler.request_authorization()
        scheduler.schedule_one_shot = AsyncMock(side_effect=SchedulingError(60, "full"))
        surface = MainSurface(scheduler, settings)

        assert await surface.confirm() == ConfirmOutcome.failed
        assert surface.phase == SurfacePhase.idle
        assert surface.can_confirm is True

    @pytest.mark.asyncio
    async def test_unreadable_status_during_confirm_recovers(self, scheduler, center, settings):
        center.get_authorization_status = AsyncMock(side_effect=RuntimeError("unavailable"))
        surface = MainSurface(scheduler, settings)

        assert await surface.confirm() == ConfirmOutcome.not_authorized
        assert surface.phase == SurfacePhase.idle
        assert surface.can_confirm is True

        del center.get_authorization_status
        assert await surface.confirm() == ConfirmOutcome.scheduled
        assert len(await center.pending_requests()) == 1
        await surface.close()

    @pytest.mark.asyncio
    async def test_unexpected_error_during_confirm_returns_to_idle(self, scheduler, settings):
        await scheduler.request_authorization()
        scheduler.schedule_one_shot = AsyncMock(side_effect=RuntimeError("boom"))
        surface = MainSurface(scheduler, settings)

        assert await surface.confirm() == ConfirmOutcome.failed
        assert surface.phase == SurfacePhase.idle
        assert await surface.confirm() != ConfirmOutcome.busy

    @pytest.mark.asyncio
    async def test_busy_while_scheduling(self, scheduler, settings):
        surface = MainSurface(scheduler, settings)
        surface.phase = SurfacePhase.scheduling
        assert surface.can_confirm is False
        assert await surface.confirm() == ConfirmOutcome.busy

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw,expected", [(5, 10), (9.5, 10), (301, 300), (1000, 300), (42.8, 42)])
    async def test_out_of_range_drag_never_reaches_scheduler(self, scheduler, settings, raw, expected):
        await scheduler.request_authorization()
        scheduler.schedule_one_shot = AsyncMock()
        surface = MainSurface(scheduler, settings)

        surface.drag(raw)
        await surface.confirm()

        scheduler.schedule_one_shot.assert_awaited_once_with(expected)
        await surface.close()

    @pytest.mark.asyncio
    async def test_foreground_refreshes_status(self, scheduler, center, settings):
        surface = MainSurface(scheduler, settings)
        await surface.request_permission()
        center.change_authorization(AuthorizationStatus.denied)
        assert surface.can_confirm is True

        await surface.on_foreground()
        assert surface.can_confirm is False

    @pytest.mark.asyncio
    async def test_view_snapshot(self, scheduler, settings):
        surface = MainSurface(scheduler, settings)
        surface.drag(90)
        view = surface.view()
        assert view.selected_seconds == 90
        assert view.phase == SurfacePhase.idle
        assert view.can_confirm is True


class TestContentSurface:
    def test_prefills_from_payload(self, scheduler, store):
        surface = ContentSurface(scheduler, store)
        assert surface.did_receive(delivered_with({"scheduledSeconds": 45})) == 45

    @pytest.mark.parametrize(
        "user_info,expected",
        [
            ({}, 60),
            ({"scheduledSeconds": "soon"}, 60),
            ({"scheduledSeconds": "45"}, 60),
            ({"scheduledSeconds": True}, 60),
            ({"scheduledSeconds": 45.0}, 60),
            ({"other": 5}, 60),
            ({"scheduledSeconds": 500}, 300),
            ({"scheduledSeconds": 3}, 10),
        ],
    )
    def test_missing_or_odd_payload(self, scheduler, store, user_info, expected):
        surface = ContentSurface(scheduler, store)
        assert surface.did_receive(delivered_with(user_info)) == expected

    @pytest.mark.asyncio
    async def test_confirm_stages_and_rearms(self, scheduler, center, store):
        """Delivered at 120 -> user picks 90 -> next reminder armed for 90s."""
        await scheduler.request_authorization()
        dismissed = []

        async def on_dismiss(identifier):
            dismissed.append(identifier)

        surface = ContentSurface(scheduler, store, on_dismiss=on_dismiss)
        assert surface.did_receive(delivered_with({"scheduledSeconds": 120})) == 120
        surface.drag(90)

        assert await surface.confirm() == ConfirmOutcome.scheduled

        assert await store.get(StoreField.NEXT_REMINDER_SECONDS) == 90
        assert await store.get(StoreField.LAST_SCHEDULED_SECONDS) == 90
        pending = await center.pending_requests()
        assert [r.trigger.time_interval for r in pending] == [90]
        assert pending[0].trigger.repeats is False
        assert surface.dismissed is True
        assert dismissed == ["delivered-1"]

    @pytest.mark.asyncio
    async def test_failed_rearm_still_dismisses(self, scheduler, store):
        scheduler.schedule_one_shot = AsyncMock(side_effect=SchedulingError(60, "full"))
        surface = ContentSurface(scheduler, store)
        surface.did_receive(delivered_with({"scheduledSeconds": 60}))

        assert await surface.confirm() == ConfirmOutcome.failed
        assert surface.dismissed is True
        assert await store.get(StoreField.NEXT_REMINDER_SECONDS) == 60

    @pytest.mark.asyncio
    async def test_never_requests_authorization(self, scheduler, store):
        scheduler.request_authorization = AsyncMock()
        surface = ContentSurface(scheduler, store)
        surface.did_receive(delivered_with({"scheduledSeconds": 30}))
        await surface.confirm()
        scheduler.request_authorization.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw,expected", [(2, 10), (999, 300)])
    async def test_out_of_range_drag_never_reaches_scheduler(self, scheduler, store, raw, expected):
        scheduler.schedule_one_shot = AsyncMock()
        surface = ContentSurface(scheduler, store)
        surface.did_receive(delivered_with({"scheduledSeconds": 60}))
        surface.drag(raw)
        await surface.confirm()
        scheduler.schedule_one_shot.assert_awaited_once_with(expected)


@pytest.mark.asyncio
async def test_round_trip_payload_prefills_content_surface(scheduler, center, store):
    """A reminder scheduled at 45s opens the content surface at 45."""
    await scheduler.request_authorization()
    request = await scheduler.schedule_one_shot(45)
    await center._fire(request)

    delivered = await center.get_delivered(request.identifier)
    surface = ContentSurface(scheduler, store)
    assert surface.did_receive(delivered) == 45
