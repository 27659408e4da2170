"""Face recognition value objects."""
from pydantic import BaseModel, Field


class ProviderMatch(BaseModel):
    """Best gallery hit returned by a provider search."""
    external_id: str = Field(..., description="Enrollment identifier tagged on the gallery face")
    similarity: float = Field(..., description="Similarity score with the searched face (0-100)")


class PixelRect(BaseModel):
    """Rectangle in pixels over a rendering surface."""
    x: float
    y: float
    width: float
    height: float
