"""
AWS Rekognition implementation of the vision provider using aioboto3.

Faces are enrolled into a single Rekognition collection. Each indexed face is
tagged with the person's external id through ``ExternalImageId``, which is
what searches report back when a face matches.

Example:
    ```python
    provider = RekognitionVisionProvider(collection_id="KrishFaces")
    await provider.initialize()
    await provider.ensure_gallery()

    boxes = await provider.detect_faces(image_bytes)
    ```
"""
import asyncio
from contextlib import AsyncExitStack
from typing import Any, Awaitable, Dict, List, Optional, Set, Tuple, TypeVar

import aioboto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from attendance.core.config import settings
from attendance.core.exceptions import (
    GalleryNotFoundError,
    NoFaceDetectedError,
    ProviderError,
    ProviderTimeout,
)
from attendance.core.logging import get_logger
from attendance.domain.entities.face import BoundingBox
from attendance.domain.interfaces.vision.provider import VisionProvider
from attendance.domain.value_objects.recognition import ProviderMatch

logger = get_logger(__name__)

T = TypeVar("T")


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


def _error_message(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Message", str(error))


class RekognitionVisionProvider(VisionProvider):
    """Vision provider backed by an AWS Rekognition face collection."""

    def __init__(
        self,
        collection_id: Optional[str] = None,
        similarity_threshold: Optional[float] = None,
        region_name: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        index_max_faces: Optional[int] = None,
        client: Optional[Any] = None,
    ):
        """Store configuration but do not open the client yet.

        Args:
            collection_id: Rekognition collection holding enrolled faces
            similarity_threshold: Default minimum similarity for searches (0-100)
            region_name: AWS region
            access_key_id: Explicit AWS key, the default credential chain is used when empty
            secret_access_key: Explicit AWS secret
            timeout: Seconds allowed for each Rekognition call
            max_attempts: Total attempts per call, including botocore's own retries
            index_max_faces: Faces indexed per enrollment photo
            client: Pre-built Rekognition client, mostly for tests
        """
        self.collection_id = collection_id or settings.COLLECTION_ID
        self.similarity_threshold = (
            similarity_threshold if similarity_threshold is not None else settings.SIMILARITY_THRESHOLD
        )
        self.region_name = region_name or settings.AWS_REGION
        self.access_key_id = access_key_id or settings.AWS_ACCESS_KEY_ID
        self.secret_access_key = secret_access_key or settings.AWS_SECRET_ACCESS_KEY
        self.timeout = timeout if timeout is not None else settings.PROVIDER_TIMEOUT
        self.max_attempts = max_attempts or settings.PROVIDER_MAX_ATTEMPTS
        self.index_max_faces = index_max_faces or settings.INDEX_MAX_FACES

        self._client = client
        self._exit_stack: Optional[AsyncExitStack] = None
        self._session = aioboto3.Session()

    async def initialize(self) -> None:
        """Open the Rekognition client."""
        if self._client is not None:
            return

        client_args: Dict[str, Any] = {
            "region_name": self.region_name,
            "config": Config(
                retries={"mode": "standard", "max_attempts": self.max_attempts},
                connect_timeout=self.timeout,
                read_timeout=self.timeout,
            ),
        }
        if self.access_key_id and self.secret_access_key:
            logger.debug("Using explicit AWS credentials from config for aioboto3")
            client_args["aws_access_key_id"] = self.access_key_id
            client_args["aws_secret_access_key"] = self.secret_access_key
        else:
            logger.debug("Allowing aioboto3 to discover AWS credentials automatically")

        exit_stack = AsyncExitStack()
        try:
            self._client = await exit_stack.enter_async_context(
                self._session.client("rekognition", **client_args)
            )
        except (BotoCoreError, ClientError) as e:
            await exit_stack.aclose()
            logger.error("Failed to initialize Rekognition client", error=str(e))
            raise ProviderError(f"Failed to initialize Rekognition client: {e}") from e

        self._exit_stack = exit_stack
        logger.info(
            "Initialized Rekognition client",
            region=self.region_name,
            collection_id=self.collection_id
        )

    async def cleanup(self) -> None:
        """Close the Rekognition client."""
        if self._exit_stack is not None:
            await self._exit_stack.aclose()
            self._exit_stack = None
        self._client = None

    async def _call(self, operation: str, **params: Any) -> Dict[str, Any]:
        """Invoke a Rekognition operation within the configured time budget.

        ClientError is passed through so callers can act on specific error codes.
        """
        if self._client is None:
            await self.initialize()

        method = getattr(self._client, operation)
        return await self._bounded(operation, method(**params))

    async def _bounded(self, operation: str, awaitable: Awaitable[T]) -> T:
        """Await a Rekognition coroutine, mapping timeouts and transport errors."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error("Rekognition call timed out", operation=operation, timeout=self.timeout)
            raise ProviderTimeout(
                f"Face service did not respond within {self.timeout:g} seconds",
                details={"operation": operation}
            ) from e
        except BotoCoreError as e:
            logger.error("Rekognition transport error", operation=operation, error=str(e))
            raise ProviderError(
                "Could not reach the face service",
                details={"operation": operation}
            ) from e

    def _translate(self, error: ClientError, operation: str) -> ProviderError:
        """Map a Rekognition ClientError onto the provider error taxonomy."""
        code = _error_code(error)
        details = {"operation": operation, "code": code}

        if code == "ResourceNotFoundException":
            return GalleryNotFoundError(
                f"Face collection '{self.collection_id}' does not exist", details=details
            )
        if code == "InvalidImageFormatException":
            return ProviderError("Image format is not supported", details=details)
        if code == "ImageTooLargeException":
            return ProviderError("Image is too large for the face service", details=details)
        return ProviderError(f"Face service error: {_error_message(error)}", details=details)

    async def ensure_gallery(self) -> None:
        try:
            await self._call("describe_collection", CollectionId=self.collection_id)
            logger.info("Using Rekognition collection", collection_id=self.collection_id)
            return
        except ClientError as e:
            if _error_code(e) != "ResourceNotFoundException":
                raise self._translate(e, "describe_collection") from e

        try:
            await self._call("create_collection", CollectionId=self.collection_id)
            logger.info("Created Rekognition collection", collection_id=self.collection_id)
        except ClientError as e:
            # Another process created it between describe and create
            if _error_code(e) != "ResourceAlreadyExistsException":
                raise self._translate(e, "create_collection") from e
            logger.info("Rekognition collection already exists", collection_id=self.collection_id)

    async def detect_faces(self, image_bytes: bytes) -> List[BoundingBox]:
        try:
            response = await self._call("detect_faces", Image={"Bytes": image_bytes})
        except ClientError as e:
            logger.error("Face detection failed", error=_error_message(e), code=_error_code(e))
            raise self._translate(e, "detect_faces") from e

        boxes = [
            BoundingBox(
                left=detail["BoundingBox"]["Left"],
                top=detail["BoundingBox"]["Top"],
                width=detail["BoundingBox"]["Width"],
                height=detail["BoundingBox"]["Height"],
            )
            for detail in response.get("FaceDetails", [])
        ]
        logger.debug("Faces detected", faces_count=len(boxes))
        return boxes

    async def search_face(
        self,
        image_bytes: bytes,
        max_results: int = 1,
        min_similarity: Optional[float] = None,
    ) -> Optional[ProviderMatch]:
        threshold = self.similarity_threshold if min_similarity is None else min_similarity
        try:
            response = await self._call(
                "search_faces_by_image",
                CollectionId=self.collection_id,
                Image={"Bytes": image_bytes},
                MaxFaces=max_results,
                FaceMatchThreshold=threshold,
            )
        except ClientError as e:
            # Rekognition rejects crops in which it cannot find a face
            if _error_code(e) == "InvalidParameterException":
                logger.warning("No searchable face in crop", error=_error_message(e))
                return None
            raise self._translate(e, "search_faces_by_image") from e

        matches = response.get("FaceMatches") or []
        if not matches:
            return None

        best = max(matches, key=lambda m: m["Similarity"])
        external_id = best.get("Face", {}).get("ExternalImageId")
        if not external_id or best["Similarity"] < threshold:
            return None
        return ProviderMatch(external_id=external_id, similarity=best["Similarity"])

    async def index_face(self, image_bytes: bytes, external_id: str) -> None:
        try:
            response = await self._call(
                "index_faces",
                CollectionId=self.collection_id,
                Image={"Bytes": image_bytes},
                ExternalImageId=external_id,
                MaxFaces=self.index_max_faces,
                QualityFilter="AUTO",
                DetectionAttributes=["DEFAULT"],
            )
        except ClientError as e:
            logger.error(
                "Face indexing failed",
                external_id=external_id,
                error=_error_message(e),
                code=_error_code(e)
            )
            raise self._translate(e, "index_faces") from e

        records = response.get("FaceRecords") or []
        if not records:
            reasons = sorted({
                reason
                for unindexed in response.get("UnindexedFaces", [])
                for reason in unindexed.get("Reasons", [])
            })
            raise NoFaceDetectedError(
                "No usable face found in photo",
                details={"external_id": external_id, "reasons": reasons}
            )

        logger.info(
            "Indexed face",
            external_id=external_id,
            face_id=records[0].get("Face", {}).get("FaceId")
        )

    async def list_enrolled_ids(self) -> Set[str]:
        if self._client is None:
            await self.initialize()

        paginator = self._client.get_paginator("list_faces")

        async def collect() -> Tuple[Set[str], int]:
            external_ids: Set[str] = set()
            pages = 0
            async for page in paginator.paginate(CollectionId=self.collection_id):
                pages += 1
                for face in page.get("Faces", []):
                    if face.get("ExternalImageId"):
                        external_ids.add(face["ExternalImageId"])
            return external_ids, pages

        try:
            external_ids, pages = await self._bounded("list_faces", collect())
        except ClientError as e:
            logger.error("Listing faces failed", error=_error_message(e), code=_error_code(e))
            raise self._translate(e, "list_faces") from e

        logger.debug("Listed enrolled ids", pages=pages, ids_count=len(external_ids))
        return external_ids
