"""Domain entities package."""
from .face import BoundingBox, DetectedFace, MatchInfo
from .identity import AttendanceRecord, DailyAttendance, Identity

__all__ = [
    "AttendanceRecord",
    "BoundingBox",
    "DailyAttendance",
    "DetectedFace",
    "Identity",
    "MatchInfo",
]
