# prompt_wizard/entities.py
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Float, Index, String
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

Base = declarative_base()


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


class WizardSnapshot(Base, TimestampMixin):
    __tablename__ = "wizard_session_snapshot"

    # "<browser session id>::prompt-builder"
    session_key: Mapped[str] = mapped_column(String(255), primary_key=True)

    payload: Mapped[dict[str, object]] = mapped_column(JSON, nullable=False)

    # epoch seconds; sliding, pushed forward on every save/load
    expires_at: Mapped[float] = mapped_column(Float, nullable=False)

    __table_args__ = (
        Index("ix_wizard_session_snapshot_expires_at", "expires_at"),
    )
