"""SQLAlchemy models for the identity store."""
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Identity(Base):
    """Enrolled person, keyed by the external id shared with the face gallery."""

    __tablename__ = "identities"

    external_id: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
        comment="Upper-cased enrollment identifier, also tagged on gallery faces"
    )
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)


class Attendance(Base):
    """Append-only attendance log. External ids are not constrained to known identities."""

    __tablename__ = "attendance"
    __table_args__ = (
        Index("idx_attendance_timestamp", "timestamp"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    external_id: Mapped[str] = mapped_column(String(255), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_now,
        nullable=False
    )
