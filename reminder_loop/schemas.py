from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt


MIN_DELAY_SECONDS = 10
MAX_DELAY_SECONDS = 300
DEFAULT_DELAY_SECONDS = 60

TIMER_CATEGORY_ID = "TIMER_REMINDER"
CONFIRM_ACTION_ID = "CONFIRM_ACTION"
PAYLOAD_SECONDS_KEY = "scheduledSeconds"

DelaySeconds = Annotated[int, Field(ge=MIN_DELAY_SECONDS, le=MAX_DELAY_SECONDS)]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class AuthorizationStatus(str, Enum):
    not_determined = "not_determined"
    denied = "denied"
    authorized = "authorized"
    provisional = "provisional"
    ephemeral = "ephemeral"

    @property
    def allows_delivery(self) -> bool:
        return self in (AuthorizationStatus.authorized, AuthorizationStatus.provisional, AuthorizationStatus.ephemeral)


class AuthorizationOption(str, Enum):
    alert = "alert"
    sound = "sound"
    badge = "badge"


class SurfacePhase(str, Enum):
    idle = "idle"
    scheduling = "scheduling"
    scheduled = "scheduled"


class ConfirmOutcome(str, Enum):
    scheduled = "scheduled"
    not_authorized = "not_authorized"
    failed = "failed"
    disabled = "disabled"
    busy = "busy"


class PermissionHint(str, Enum):
    request_permission = "request_permission"
    open_settings = "open_settings"
    enabled = "enabled"


# ---------------------------------------------------------------------------
# Notification Schemas
# ---------------------------------------------------------------------------
class NotificationAction(BaseModel):
    identifier: str
    title: str
    foreground: bool = False


class NotificationCategory(BaseModel):
    identifier: str
    actions: List[NotificationAction] = Field(default_factory=list)


class NotificationContent(BaseModel):
    title: str
    body: str
    sound: Optional[str] = Field("default", description="Sound name, None for silent")
    category_identifier: str = TIMER_CATEGORY_ID
    user_info: Dict[str, Any] = Field(default_factory=dict)


class TimeIntervalTrigger(BaseModel):
    time_interval: int = Field(..., gt=0, description="Seconds until the notification fires")
    repeats: bool = False


class NotificationRequest(BaseModel):
    identifier: str = Field(..., description="Unique id, freshly generated per request")
    content: NotificationContent
    trigger: TimeIntervalTrigger
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def fire_at(self) -> datetime:
        return self.created_at + timedelta(seconds=self.trigger.time_interval)


class DeliveredNotification(BaseModel):
    request: NotificationRequest
    delivered_at: datetime = Field(default_factory=utcnow)


class ReminderPayload(BaseModel):
    """Typed view of a delivered notification's user_info."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    scheduled_seconds: StrictInt = Field(..., alias=PAYLOAD_SECONDS_KEY)


# ---------------------------------------------------------------------------
# Shared Store Schemas
# ---------------------------------------------------------------------------
class ReminderRecord(BaseModel):
    last_scheduled_seconds: int = Field(DEFAULT_DELAY_SECONDS, alias="lastScheduledSeconds")
    next_reminder_seconds: int = Field(DEFAULT_DELAY_SECONDS, alias="nextReminderSeconds")

    model_config = ConfigDict(populate_by_name=True)


# ---------------------------------------------------------------------------
# API Schemas
# ---------------------------------------------------------------------------
class PickerUpdate(BaseModel):
    seconds: float = Field(..., description="Raw slider position; truncated and clamped to [10, 300]")


class ContentConfirm(BaseModel):
    seconds: Optional[float] = Field(None, description="Slider position chosen in the expanded notification")


class AuthorizationChange(BaseModel):
    status: AuthorizationStatus


class MainSurfaceView(BaseModel):
    selected_seconds: int
    phase: SurfacePhase
    authorization_status: AuthorizationStatus
    can_confirm: bool
    permission_hint: PermissionHint


class ConfirmResponse(BaseModel):
    outcome: ConfirmOutcome
    selected_seconds: int
    view: Optional[MainSurfaceView] = None


class ContentSurfaceView(BaseModel):
    notification_id: str
    selected_seconds: int
    dismissed: bool = False


class PendingNotificationOut(BaseModel):
    identifier: str
    fire_delay: DelaySeconds
    fire_at: datetime
    payload: Dict[str, Any]


class DeliveredNotificationOut(BaseModel):
    identifier: str
    title: str
    body: str
    delivered_at: datetime
    payload: Dict[str, Any]


class ContentConfirmResponse(BaseModel):
    outcome: ConfirmOutcome
    view: ContentSurfaceView


class StoreOut(BaseModel):
    app_group: str
    last_scheduled_seconds: int
    next_reminder_seconds: int
