"""SQLAlchemy-backed identity store."""
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from attendance.core.exceptions import StoreError
from attendance.core.logging import get_logger
from attendance.domain.entities.identity import AttendanceRecord, DailyAttendance, Identity
from attendance.domain.interfaces.storage.identity_store import IdentityStore
from attendance.infrastructure.database.session import (
    create_engine,
    create_schema,
    create_session_factory,
    get_db_session,
)
from attendance.infrastructure.database.unit_of_work import UnitOfWork

logger = get_logger(__name__)


class SqlIdentityStore(IdentityStore):
    """Identity store over a relational database.

    Every operation runs in its own session and unit of work, so each write
    is a single committed row and no transaction spans several faces.

    Example:
        ```python
        store = SqlIdentityStore.from_url("sqlite+aiosqlite:///./attendance.db")
        await store.initialize()
        await store.upsert_identity("E001", "Ada")
        await store.record_attendance("E001")
        ```
    """

    def __init__(self, engine: AsyncEngine) -> None:
        """Initialize the store.

        Args:
            engine: Async engine for the identity database
        """
        self._engine = engine
        self._session_factory = create_session_factory(engine)

    @classmethod
    def from_url(cls, database_url: str, echo: bool = False) -> "SqlIdentityStore":
        """Build a store with its own engine."""
        return cls(create_engine(database_url, echo=echo))

    async def initialize(self) -> None:
        """Create tables if needed."""
        try:
            await create_schema(self._engine)
        except SQLAlchemyError as e:
            logger.error("Failed to create identity store schema", error=str(e), exc_info=True)
            raise StoreError(f"Failed to initialize identity store: {e}") from e

    async def close(self) -> None:
        """Dispose of pooled connections."""
        await self._engine.dispose()

    async def upsert_identity(self, external_id: str, display_name: str) -> Identity:
        try:
            async with get_db_session(self._session_factory) as session:
                async with UnitOfWork(session) as uow:
                    row = await uow.identities.upsert(external_id, display_name)
                    identity = Identity.model_validate(row)
        except SQLAlchemyError as e:
            logger.error(
                "Failed to upsert identity",
                external_id=external_id,
                error=str(e),
                exc_info=True
            )
            raise StoreError(f"Failed to save identity '{external_id}'") from e

        logger.debug("Upserted identity", external_id=external_id)
        return identity

    async def get_identity(self, external_id: str) -> Optional[Identity]:
        try:
            async with get_db_session(self._session_factory) as session:
                async with UnitOfWork(session) as uow:
                    row = await uow.identities.get(external_id)
                    return Identity.model_validate(row) if row else None
        except SQLAlchemyError as e:
            logger.error(
                "Failed to look up identity",
                external_id=external_id,
                error=str(e),
                exc_info=True
            )
            raise StoreError(f"Failed to look up identity '{external_id}'") from e

    async def record_attendance(self, external_id: str) -> AttendanceRecord:
        try:
            async with get_db_session(self._session_factory) as session:
                async with UnitOfWork(session) as uow:
                    row = await uow.attendance.add(external_id)
                    record = AttendanceRecord.model_validate(row)
        except SQLAlchemyError as e:
            logger.error(
                "Failed to record attendance",
                external_id=external_id,
                error=str(e),
                exc_info=True
            )
            raise StoreError(f"Failed to record attendance for '{external_id}'") from e

        logger.info("Recorded attendance", external_id=external_id, record_id=record.id)
        return record

    async def daily_attendance(self, days: int = 7) -> List[DailyAttendance]:
        try:
            async with get_db_session(self._session_factory) as session:
                async with UnitOfWork(session) as uow:
                    rows = await uow.attendance.count_by_day(days)
        except SQLAlchemyError as e:
            logger.error("Failed to read attendance stats", error=str(e), exc_info=True)
            raise StoreError("Failed to read attendance statistics") from e

        return [DailyAttendance(day=day, count=count) for day, count in rows]
