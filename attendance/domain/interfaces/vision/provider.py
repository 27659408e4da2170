"""Vision provider interface."""
from abc import ABC, abstractmethod
from typing import List, Optional, Set

from ...entities.face import BoundingBox
from ...value_objects.recognition import ProviderMatch


class VisionProvider(ABC):
    """Interface over an external face detection and recognition service.

    Implementations own the face gallery. Callers only ever see bounding boxes
    as fractions of the image size and external ids tagged on gallery faces.
    """

    @abstractmethod
    async def ensure_gallery(self) -> None:
        """
        Make sure the configured gallery exists, creating it when absent.

        Calling this repeatedly leaves the gallery in the same state as calling it once.

        Raises:
            ProviderError: If the gallery cannot be described or created
        """
        pass

    @abstractmethod
    async def detect_faces(self, image_bytes: bytes) -> List[BoundingBox]:
        """
        Detect all faces in an image.

        Args:
            image_bytes: Raw image data

        Returns:
            Bounding boxes in the order reported by the provider, empty when no faces are found

        Raises:
            ProviderError: On transport failure or when the provider rejects the image
            ProviderTimeout: If the call exceeds its time budget
        """
        pass

    @abstractmethod
    async def search_face(
        self,
        image_bytes: bytes,
        max_results: int = 1,
        min_similarity: Optional[float] = None,
    ) -> Optional[ProviderMatch]:
        """
        Search the gallery for the face in a cropped image.

        Args:
            image_bytes: Image data containing a single face
            max_results: Maximum number of gallery hits to request
            min_similarity: Minimum similarity (0-100), implementation default when None

        Returns:
            The best match at or above min_similarity, or None

        Raises:
            ProviderError: On transport failure
            ProviderTimeout: If the call exceeds its time budget
        """
        pass

    @abstractmethod
    async def index_face(self, image_bytes: bytes, external_id: str) -> None:
        """
        Enroll the face in an image under an external id.

        Args:
            image_bytes: Raw image data
            external_id: Identifier to tag the indexed face with

        Raises:
            NoFaceDetectedError: If no face could be indexed from the image
            ProviderError: On transport failure
            ProviderTimeout: If the call exceeds its time budget
        """
        pass

    @abstractmethod
    async def list_enrolled_ids(self) -> Set[str]:
        """
        List the distinct external ids of all faces in the gallery.

        Returns:
            Set of external ids, faces without one are skipped

        Raises:
            ProviderError: On transport failure
        """
        pass
