from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App environment
    env: str = Field(default="development", alias="ENV")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Shared store (app-group scoped key-value rows)
    database_url: str = Field(default="sqlite+aiosqlite:///./reminder_loop.db", alias="DATABASE_URL")
    app_group: str = Field(default="group.reminder-loop", alias="APP_GROUP")

    # Local notification center
    # grant → authorized, deny → denied, provisional → provisional
    permission_policy: Literal["grant", "deny", "provisional"] = Field(default="grant", alias="PERMISSION_POLICY")
    max_pending_notifications: int = Field(default=64, alias="MAX_PENDING_NOTIFICATIONS")
    delivered_history_limit: int = Field(default=50, alias="DELIVERED_HISTORY_LIMIT")

    # Notification content
    notification_title: str = Field(default="Timed reminder", alias="NOTIFICATION_TITLE")
    notification_body: str = Field(
        default="Time's up! Expand this notification to pick the next reminder.",
        alias="NOTIFICATION_BODY",
    )

    # Main surface
    success_feedback_seconds: float = Field(default=2.0, alias="SUCCESS_FEEDBACK_SECONDS")

    # Delivery webhook (optional)
    notification_webhook_url: Optional[str] = Field(default=None, alias="NOTIFICATION_WEBHOOK_URL")
    notification_webhook_token: Optional[str] = Field(default=None, alias="NOTIFICATION_WEBHOOK_TOKEN")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
