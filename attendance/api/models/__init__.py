"""API models package."""
from .attendance import (
    BoundingBoxOut,
    DailyCount,
    DetectResponse,
    EnrollResponse,
    ErrorResponse,
    FaceResult,
    MatchOut,
)

__all__ = [
    "BoundingBoxOut",
    "DailyCount",
    "DetectResponse",
    "EnrollResponse",
    "ErrorResponse",
    "FaceResult",
    "MatchOut",
]
