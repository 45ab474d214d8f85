"""
Shared Store: integer fields visible to both the main surface and the
notification content surface, scoped to one app group.

Reads fall back to the default and writes are dropped when the backing
store is unreachable. Callers never see a store failure.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from enum import Enum
from typing import Dict

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from reminder_loop.models.models import SharedValue
from reminder_loop.schemas import DEFAULT_DELAY_SECONDS, ReminderRecord

logger = logging.getLogger("shared_store")

# Single-statement upserts so concurrent writers never trip the unique constraint
_UPSERTS = {"sqlite": sqlite_insert, "postgresql": pg_insert}


class StoreField(str, Enum):
    LAST_SCHEDULED_SECONDS = "lastScheduledSeconds"
    NEXT_REMINDER_SECONDS = "nextReminderSeconds"


class SharedStore(ABC):
    """Key-value contract shared by both surfaces. Last write wins."""

    default: int = DEFAULT_DELAY_SECONDS

    @abstractmethod
    async def get(self, field: StoreField) -> int:
        """Return the stored value, or ``self.default`` if unset or unreachable."""
        raise NotImplementedError

    @abstractmethod
    async def set(self, field: StoreField, value: int) -> None:
        """Overwrite the value. Failures are logged, never raised."""
        raise NotImplementedError

    async def get_record(self) -> ReminderRecord:
        return ReminderRecord(
            last_scheduled_seconds=await self.get(StoreField.LAST_SCHEDULED_SECONDS),
            next_reminder_seconds=await self.get(StoreField.NEXT_REMINDER_SECONDS),
        )


class MemorySharedStore(SharedStore):
    def __init__(self, default: int = DEFAULT_DELAY_SECONDS):
        self.default = default
        self._values: Dict[StoreField, int] = {}

    async def get(self, field: StoreField) -> int:
        return self._values.get(StoreField(field), self.default)

    async def set(self, field: StoreField, value: int) -> None:
        self._values[StoreField(field)] = int(value)


class SqlSharedStore(SharedStore):
    def __init__(self, session_factory: async_sessionmaker, app_group: str, default: int = DEFAULT_DELAY_SECONDS):
        self._session_factory = session_factory
        self.app_group = app_group
        self.default = default

    async def get(self, field: StoreField) -> int:
        key = StoreField(field).value
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(SharedValue.value)
                    .where(SharedValue.app_group == self.app_group)
                    .where(SharedValue.key == key)
                )
                value = result.scalar_one_or_none()
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Shared store unavailable reading %s/%s: %s", self.app_group, key, e)
            return self.default
        return self.default if value is None else int(value)

    async def set(self, field: StoreField, value: int) -> None:
        key = StoreField(field).value
        try:
            async with self._session_factory() as session:
                upsert = _UPSERTS.get(session.get_bind().dialect.name)
                if upsert is not None:
                    now = datetime.now(timezone.utc)
                    stmt = upsert(SharedValue).values(app_group=self.app_group, key=key, value=int(value), updated_at=now)
                    stmt = stmt.on_conflict_do_update(
                        index_elements=[SharedValue.app_group, SharedValue.key],
                        set_={"value": int(value), "updated_at": now},
                    )
                    await session.execute(stmt)
                else:
                    await self._select_and_write(session, key, int(value))
                await session.commit()
            logger.debug("Stored %s/%s = %s", self.app_group, key, value)
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Shared store unavailable writing %s/%s: %s", self.app_group, key, e)

    async def _select_and_write(self, session, key: str, value: int) -> None:
        # Dialects without ON CONFLICT; concurrent first writes may still collide
        result = await session.execute(
            select(SharedValue)
            .where(SharedValue.app_group == self.app_group)
            .where(SharedValue.key == key)
        )
        row = result.scalar_one_or_none()
        if row is None:
            session.add(SharedValue(app_group=self.app_group, key=key, value=value))
        else:
            row.value = value
