"""Application services."""
from .enrollment import EnrollmentService
from .recognition import RecognitionService

__all__ = ["EnrollmentService", "RecognitionService"]
