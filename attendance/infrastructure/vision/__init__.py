"""Vision provider implementations."""
from .rekognition import RekognitionVisionProvider

__all__ = ["RekognitionVisionProvider"]
