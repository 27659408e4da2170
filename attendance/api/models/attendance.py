"""API response models for detection, enrollment and attendance."""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from attendance.domain.entities.face import DetectedFace
from attendance.domain.entities.identity import DailyAttendance


class BoundingBoxOut(BaseModel):
    """Bounding box serialized with the provider's capitalized keys."""
    model_config = ConfigDict(populate_by_name=True)

    left: float = Field(..., alias="Left", description="Left offset (0-1)")
    top: float = Field(..., alias="Top", description="Top offset (0-1)")
    width: float = Field(..., alias="Width", description="Width (0-1)")
    height: float = Field(..., alias="Height", description="Height (0-1)")


class MatchOut(BaseModel):
    """Identity matched for a face."""
    name: str = Field(..., description="Display name, 'Unknown' when not enrolled locally")
    usn: str = Field(..., description="External id of the matched person")
    similarity: float = Field(..., description="Similarity score (0-100)", ge=0.0, le=100.0)


class FaceResult(BaseModel):
    """One detected face and its match."""
    model_config = ConfigDict(populate_by_name=True)

    bounding_box: BoundingBoxOut = Field(..., alias="boundingBox")
    match: Optional[MatchOut] = None

    @classmethod
    def from_detected_face(cls, face: DetectedFace) -> "FaceResult":
        """Create an API result from a domain DetectedFace."""
        box = face.bounding_box
        match = None
        if face.match is not None:
            match = MatchOut(
                name=face.match.display_name,
                usn=face.match.external_id,
                similarity=face.match.similarity
            )
        return cls(
            bounding_box=BoundingBoxOut(
                left=box.left, top=box.top, width=box.width, height=box.height
            ),
            match=match
        )


class DetectResponse(BaseModel):
    """Response model for the /detect endpoint."""
    results: List[FaceResult] = Field(..., description="Detected faces in detection order")

    @classmethod
    def from_detected_faces(cls, faces: List[DetectedFace]) -> "DetectResponse":
        return cls(results=[FaceResult.from_detected_face(face) for face in faces])


class EnrollResponse(BaseModel):
    """Response model for the /enroll endpoint."""
    message: str


class DailyCount(BaseModel):
    """Attendance count for one day."""
    day: str = Field(..., description="Calendar day as YYYY-MM-DD")
    count: int = Field(..., ge=0)

    @classmethod
    def from_daily_attendance(cls, stat: DailyAttendance) -> "DailyCount":
        return cls(day=stat.day.isoformat(), count=stat.count)


class ErrorResponse(BaseModel):
    """Body of every error response."""
    error: str
