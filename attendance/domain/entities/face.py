"""Core face domain entities."""
from typing import Optional

from pydantic import BaseModel, Field


class BoundingBox(BaseModel):
    """Face bounding box as fractions of the image width and height.

    Providers may round a box edge slightly past the image border, so values
    are not clamped here; consumers clamp when mapping to pixels.
    """
    left: float = Field(..., description="Left offset as a fraction of image width")
    top: float = Field(..., description="Top offset as a fraction of image height")
    width: float = Field(..., description="Width as a fraction of image width")
    height: float = Field(..., description="Height as a fraction of image height")


class MatchInfo(BaseModel):
    """Identity resolved for a detected face."""
    external_id: str = Field(..., description="Enrollment identifier of the matched person")
    display_name: str = Field(..., description="Name shown for the matched person")
    similarity: float = Field(..., description="Provider similarity score (0-100)", ge=0.0, le=100.0)


class DetectedFace(BaseModel):
    """A face found in a submitted image, with its match if any."""
    bounding_box: BoundingBox = Field(..., description="Face location in the image")
    match: Optional[MatchInfo] = Field(None, description="Resolved identity, None when unmatched")
