from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

Base = declarative_base()


class SharedValue(Base):
    """One integer field of the app-group shared store."""

    __tablename__ = "shared_store"
    __table_args__ = (UniqueConstraint("app_group", "key", name="uq_shared_store_group_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    app_group: Mapped[str] = mapped_column(String(255), index=True)
    key: Mapped[str] = mapped_column(String(64))
    value: Mapped[int] = mapped_column(Integer)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
