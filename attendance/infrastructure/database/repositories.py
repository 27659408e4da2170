"""Database repositories for the identity store."""
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from attendance.infrastructure.database.models import Attendance, Identity


class IdentityRepository:
    """Repository for identity operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository.

        Args:
            session: Database session
        """
        self._session = session

    async def get(self, external_id: str) -> Optional[Identity]:
        """Get an identity by external id, None when not enrolled."""
        return await self._session.get(Identity, external_id)

    async def upsert(self, external_id: str, display_name: str) -> Identity:
        """Insert an identity or replace its display name.

        Runs as a single INSERT ... ON CONFLICT statement.

        Args:
            external_id: Normalized enrollment identifier
            display_name: Name to store

        Returns:
            Identity: The persistent row
        """
        dialect = self._session.get_bind().dialect.name
        insert = postgresql.insert if dialect == "postgresql" else sqlite.insert

        stmt = insert(Identity).values(external_id=external_id, display_name=display_name)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Identity.external_id],
            set_={"display_name": stmt.excluded.display_name}
        )
        await self._session.execute(stmt)
        return await self._session.get(Identity, external_id, populate_existing=True)


class AttendanceRepository:
    """Repository for attendance log operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository.

        Args:
            session: Database session
        """
        self._session = session

    async def add(self, external_id: str) -> Attendance:
        """Append an attendance row timestamped now."""
        record = Attendance(external_id=external_id)
        self._session.add(record)
        await self._session.flush()
        return record

    async def count_by_day(self, days: int) -> List[Tuple[str, int]]:
        """Count rows per calendar day for the most recent days that have rows.

        Returns:
            List of (YYYY-MM-DD, count) tuples, newest day first
        """
        day = func.date(Attendance.timestamp).label("day")
        stmt = (
            select(day, func.count(Attendance.id).label("count"))
            .group_by(day)
            .order_by(day.desc())
            .limit(days)
        )
        result = await self._session.execute(stmt)
        return [(str(day_value), count) for day_value, count in result.all()]
