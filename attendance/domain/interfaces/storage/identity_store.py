"""Identity store interface."""
from abc import ABC, abstractmethod
from typing import List, Optional

from ...entities.identity import AttendanceRecord, DailyAttendance, Identity


class IdentityStore(ABC):
    """Interface for enrolled identities and the attendance log."""

    @abstractmethod
    async def upsert_identity(self, external_id: str, display_name: str) -> Identity:
        """
        Insert an identity or replace the display name of an existing one.

        Args:
            external_id: Normalized enrollment identifier
            display_name: Name to show for the person

        Returns:
            The stored identity

        Raises:
            StoreError: If the write fails
        """
        pass

    @abstractmethod
    async def get_identity(self, external_id: str) -> Optional[Identity]:
        """
        Look up an identity by external id.

        Returns:
            The identity, or None when it is not enrolled

        Raises:
            StoreError: If the read fails
        """
        pass

    @abstractmethod
    async def record_attendance(self, external_id: str) -> AttendanceRecord:
        """
        Append one attendance event timestamped now.

        Raises:
            StoreError: If the write fails
        """
        pass

    @abstractmethod
    async def daily_attendance(self, days: int = 7) -> List[DailyAttendance]:
        """
        Count attendance events per day for the most recent days with events.

        Args:
            days: Number of distinct days to return

        Returns:
            Daily counts, newest day first

        Raises:
            StoreError: If the read fails
        """
        pass
