"""Recognition service turning a submitted photo into matched faces and attendance."""
import asyncio
from typing import List, Optional

import numpy as np

from attendance.core.exceptions import InvalidRegionError, ProviderError
from attendance.core.logging import get_logger
from attendance.core.utils.image import bytes_to_numpy_array, crop_region
from attendance.domain.entities.face import BoundingBox, DetectedFace, MatchInfo
from attendance.domain.interfaces.storage.identity_store import IdentityStore
from attendance.domain.interfaces.vision.provider import VisionProvider
from attendance.domain.value_objects.recognition import ProviderMatch

logger = get_logger(__name__)

UNKNOWN_NAME = "Unknown"


class RecognitionService:
    """Service for recognizing enrolled people in a photo and recording their attendance.

    This service:
    1. Detects every face in the photo with the vision provider
    2. Crops each face and searches the gallery for it
    3. Resolves the display name of each match and appends an attendance record

    Faces are searched one at a time by default. Setting ``concurrency`` above 1
    lets crops and searches overlap, which is safe because each face is
    isolated and name lookups and attendance inserts still run afterwards in
    detection order, so both the result list and attendance timestamps follow
    the order the detector reported the faces in.

    Example:
        ```python
        service = RecognitionService(provider, store, similarity_threshold=75.0)
        faces = await service.recognize(image_bytes)
        ```
    """

    def __init__(
        self,
        provider: VisionProvider,
        store: IdentityStore,
        similarity_threshold: float = 75.0,
        concurrency: int = 1,
    ) -> None:
        """Initialize the recognition service.

        Args:
            provider: Vision provider used for detection and gallery search
            store: Identity store for names and attendance
            similarity_threshold: Minimum similarity (0-100) for a match
            concurrency: Maximum number of faces cropped and searched at once
        """
        self.provider = provider
        self.store = store
        self.similarity_threshold = similarity_threshold
        self.concurrency = max(1, concurrency)

    async def recognize(self, image_bytes: bytes) -> List[DetectedFace]:
        """Recognize every face in a photo.

        Args:
            image_bytes: Encoded photo

        Returns:
            One DetectedFace per detected face, in detection order

        Raises:
            InvalidImageError: If the photo cannot be decoded
            ProviderError: If face detection fails
            StoreError: If a name lookup or attendance insert fails
        """
        img = bytes_to_numpy_array(image_bytes)
        height, width = img.shape[:2]

        boxes = await self.provider.detect_faces(image_bytes)
        logger.info("Faces detected", faces_count=len(boxes), width=width, height=height)
        if not boxes:
            return []

        semaphore = asyncio.Semaphore(self.concurrency)

        async def bounded_search(index: int, box: BoundingBox) -> Optional[ProviderMatch]:
            async with semaphore:
                return await self._search(img, index, box)

        matches = await asyncio.gather(
            *(bounded_search(index, box) for index, box in enumerate(boxes))
        )

        results = []
        for box, match in zip(boxes, matches):
            match_info = await self._record(match) if match is not None else None
            results.append(DetectedFace(bounding_box=box, match=match_info))

        logger.info(
            "Recognition completed",
            faces_count=len(results),
            matched_count=sum(1 for face in results if face.match is not None)
        )
        return results

    async def _search(self, img: np.ndarray, index: int, box: BoundingBox) -> Optional[ProviderMatch]:
        """Crop one face and search the gallery for it.

        Failures are confined to this face and reported as no match.
        """
        try:
            crop = crop_region(img, box)
            match = await self.provider.search_face(
                crop,
                max_results=1,
                min_similarity=self.similarity_threshold
            )
        except InvalidRegionError as e:
            logger.warning("Skipping face with degenerate region", face_index=index, error=str(e))
            return None
        except ProviderError as e:
            logger.warning("Face search failed", face_index=index, error=str(e))
            return None

        if match is None or match.similarity < self.similarity_threshold:
            logger.info("No match found in collection", face_index=index)
            return None
        return match

    async def _record(self, match: ProviderMatch) -> MatchInfo:
        """Resolve the display name for a match and log its attendance."""
        identity = await self.store.get_identity(match.external_id)
        display_name = identity.display_name if identity else UNKNOWN_NAME
        if identity is None:
            logger.warning("Matched face has no enrolled identity", external_id=match.external_id)

        await self.store.record_attendance(match.external_id)

        logger.info(
            "Match found",
            external_id=match.external_id,
            display_name=display_name,
            similarity=match.similarity
        )
        return MatchInfo(
            external_id=match.external_id,
            display_name=display_name,
            similarity=match.similarity
        )
