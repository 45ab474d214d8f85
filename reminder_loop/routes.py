import logging
from typing import List

from fastapi import APIRouter, HTTPException, Request

from reminder_loop import schemas
from reminder_loop.notifications.center import LocalNotificationCenter, NotificationCenter
from reminder_loop.services.scheduler import NotificationScheduler
from reminder_loop.services.shared_store import SharedStore
from reminder_loop.surfaces import ContentSurface, MainSurface

logger = logging.getLogger("routes")
router = APIRouter(tags=["Core"])


def _main_surface(request: Request) -> MainSurface:
    return request.app.state.main_surface


def _scheduler(request: Request) -> NotificationScheduler:
    return request.app.state.scheduler


def _center(request: Request) -> NotificationCenter:
    return request.app.state.center


def _store(request: Request) -> SharedStore:
    return request.app.state.store


async def _open_content_surface(request: Request, notification_id: str) -> ContentSurface:
    center = _center(request)
    delivered = await center.get_delivered(notification_id)
    if delivered is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    surface = ContentSurface(_scheduler(request), _store(request), on_dismiss=center.remove_delivered)
    surface.did_receive(delivered)
    return surface


# ---------------------------------------------------------------------------
# Main surface
# ---------------------------------------------------------------------------

@router.get("/main", response_model=schemas.MainSurfaceView)
async def get_main(request: Request):
    return _main_surface(request).view()


@router.put("/main/picker", response_model=schemas.MainSurfaceView)
async def put_main_picker(body: schemas.PickerUpdate, request: Request):
    surface = _main_surface(request)
    surface.drag(body.seconds)
    return surface.view()


@router.post("/main/confirm", response_model=schemas.ConfirmResponse)
async def post_main_confirm(request: Request):
    surface = _main_surface(request)
    outcome = await surface.confirm()
    return {"outcome": outcome, "selected_seconds": surface.picker.value, "view": surface.view()}


@router.post("/main/authorization", response_model=schemas.MainSurfaceView)
async def post_main_authorization(request: Request):
    surface = _main_surface(request)
    await surface.request_permission()
    return surface.view()


@router.post("/main/foreground", response_model=schemas.MainSurfaceView)
async def post_main_foreground(request: Request):
    surface = _main_surface(request)
    await surface.on_foreground()
    return surface.view()


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

@router.get("/notifications/pending", response_model=List[schemas.PendingNotificationOut])
async def get_pending(request: Request):
    pending = await _scheduler(request).pending()
    return [
        {
            "identifier": r.identifier,
            "fire_delay": r.trigger.time_interval,
            "fire_at": r.fire_at,
            "payload": r.content.user_info,
        }
        for r in pending
    ]


@router.delete("/notifications/pending")
async def delete_pending(request: Request):
    await _scheduler(request).cancel_all()
    return {"status": "ok", "pending": len(await _scheduler(request).pending())}


@router.get("/notifications/delivered", response_model=List[schemas.DeliveredNotificationOut])
async def get_delivered(request: Request):
    delivered = await _center(request).delivered_notifications()
    return [
        {
            "identifier": n.request.identifier,
            "title": n.request.content.title,
            "body": n.request.content.body,
            "delivered_at": n.delivered_at,
            "payload": n.request.content.user_info,
        }
        for n in delivered
    ]


@router.get("/notifications/{notification_id}/content", response_model=schemas.ContentSurfaceView)
async def get_content(notification_id: str, request: Request):
    surface = await _open_content_surface(request, notification_id)
    return surface.view()


@router.post("/notifications/{notification_id}/content/confirm", response_model=schemas.ContentConfirmResponse)
async def post_content_confirm(notification_id: str, body: schemas.ContentConfirm, request: Request):
    surface = await _open_content_surface(request, notification_id)
    if body.seconds is not None:
        surface.drag(body.seconds)
    outcome = await surface.confirm()
    return {"outcome": outcome, "view": surface.view()}


# ---------------------------------------------------------------------------
# Shared store & system
# ---------------------------------------------------------------------------

@router.get("/store", response_model=schemas.StoreOut)
async def get_store(request: Request):
    store = _store(request)
    record = await store.get_record()
    app_group = getattr(store, "app_group", request.app.state.settings.app_group)
    return {
        "app_group": app_group,
        "last_scheduled_seconds": record.last_scheduled_seconds,
        "next_reminder_seconds": record.next_reminder_seconds,
    }


@router.put("/system/authorization", response_model=schemas.MainSurfaceView)
async def put_system_authorization(body: schemas.AuthorizationChange, request: Request):
    center = _center(request)
    if not isinstance(center, LocalNotificationCenter):
        raise HTTPException(status_code=409, detail="Authorization is managed by the host notification service")
    center.change_authorization(body.status)
    return _main_surface(request).view()
