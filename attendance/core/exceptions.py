"""Custom exceptions for the face attendance service."""
from typing import Optional


class AttendanceError(Exception):
    """Base exception for attendance operations."""

    def __init__(self, message: str, details: Optional[dict] = None):
        """
        Initialize attendance error.

        Args:
            message: Error description
            details: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(AttendanceError):
    """Raised when a required input is missing or malformed."""
    pass


class InvalidImageError(AttendanceError):
    """Raised when the provided image cannot be decoded."""
    pass


class InvalidRegionError(AttendanceError):
    """Raised when a bounding box maps to an empty pixel region."""
    pass


class ProviderError(AttendanceError):
    """Raised when the vision provider fails or rejects a request."""
    pass


class ProviderTimeout(ProviderError):
    """Raised when a vision provider call exceeds its time budget."""
    pass


class NoFaceDetectedError(ProviderError):
    """Raised when the provider finds no face to index in an image."""
    pass


class GalleryNotFoundError(ProviderError):
    """Raised when the configured face collection does not exist."""
    pass


class StoreError(AttendanceError):
    """Raised when the identity store cannot be read or written."""
    pass


class ServiceNotInitializedError(AttendanceError):
    """Raised when a service is requested before the container is initialized."""
    pass
