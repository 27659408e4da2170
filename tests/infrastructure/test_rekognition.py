"""Tests for the Rekognition vision provider against a stand-in client."""
import asyncio
from typing import Dict, List, Optional, Set

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from attendance.core.exceptions import (
    GalleryNotFoundError,
    NoFaceDetectedError,
    ProviderError,
    ProviderTimeout,
)
from attendance.infrastructure.vision.rekognition import RekognitionVisionProvider


def client_error(code: str, operation: str, message: str = "error") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class StubRekognitionClient:
    """Minimal async stand-in for an aioboto3 Rekognition client."""

    def __init__(self) -> None:
        self.collections: Set[str] = set()
        self.calls: List[tuple] = []
        self.responses: Dict[str, list] = {}
        self.delay: Optional[float] = None
        self.create_race = False

    def queue(self, operation: str, response) -> None:
        self.responses.setdefault(operation, []).append(response)

    async def _respond(self, operation: str, params: dict):
        self.calls.append((operation, params))
        if self.delay is not None:
            await asyncio.sleep(self.delay)
        response = self.responses[operation].pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def describe_collection(self, CollectionId):
        self.calls.append(("describe_collection", {"CollectionId": CollectionId}))
        if CollectionId not in self.collections:
            raise client_error("ResourceNotFoundException", "DescribeCollection")
        return {"FaceCount": 0}

    async def create_collection(self, CollectionId):
        self.calls.append(("create_collection", {"CollectionId": CollectionId}))
        if self.create_race or CollectionId in self.collections:
            raise client_error("ResourceAlreadyExistsException", "CreateCollection")
        self.collections.add(CollectionId)
        return {"StatusCode": 200}

    async def detect_faces(self, **params):
        return await self._respond("detect_faces", params)

    async def search_faces_by_image(self, **params):
        return await self._respond("search_faces_by_image", params)

    async def index_faces(self, **params):
        return await self._respond("index_faces", params)

    def get_paginator(self, operation: str) -> "StubPaginator":
        return StubPaginator(self, operation)


class StubPaginator:
    """Follows NextToken across queued responses like an aiobotocore paginator."""

    def __init__(self, client: StubRekognitionClient, operation: str) -> None:
        self._client = client
        self._operation = operation

    async def paginate(self, **params):
        while True:
            page = await self._client._respond(self._operation, dict(params))
            yield page
            if not page.get("NextToken"):
                return
            params["NextToken"] = page["NextToken"]


@pytest.fixture
def client() -> StubRekognitionClient:
    return StubRekognitionClient()


@pytest.fixture
def provider(client) -> RekognitionVisionProvider:
    return RekognitionVisionProvider(
        collection_id="TestFaces",
        similarity_threshold=75.0,
        timeout=1.0,
        client=client,
    )


def operations(client: StubRekognitionClient) -> List[str]:
    return [operation for operation, _ in client.calls]


class TestEnsureGallery:
    """Idempotent gallery creation."""

    async def test_creates_missing_gallery_once(self, provider, client):
        await provider.ensure_gallery()
        await provider.ensure_gallery()

        assert client.collections == {"TestFaces"}
        assert operations(client).count("create_collection") == 1

    async def test_existing_gallery_is_left_alone(self, provider, client):
        client.collections.add("TestFaces")

        await provider.ensure_gallery()

        assert operations(client) == ["describe_collection"]

    async def test_concurrent_creation_is_tolerated(self, provider, client):
        client.create_race = True

        await provider.ensure_gallery()

        assert operations(client) == ["describe_collection", "create_collection"]


class TestDetectFaces:
    """Face detection mapping."""

    async def test_maps_bounding_boxes_in_order(self, provider, client):
        client.queue("detect_faces", {
            "FaceDetails": [
                {"BoundingBox": {"Left": 0.1, "Top": 0.2, "Width": 0.3, "Height": 0.4}},
                {"BoundingBox": {"Left": 0.6, "Top": 0.1, "Width": 0.2, "Height": 0.3}},
            ]
        })

        boxes = await provider.detect_faces(b"image")

        assert [(box.left, box.top, box.width, box.height) for box in boxes] == [
            (0.1, 0.2, 0.3, 0.4),
            (0.6, 0.1, 0.2, 0.3),
        ]
        assert client.calls[0][1] == {"Image": {"Bytes": b"image"}}

    async def test_no_faces(self, provider, client):
        client.queue("detect_faces", {"FaceDetails": []})
        assert await provider.detect_faces(b"image") == []

    async def test_rejected_image_is_provider_error(self, provider, client):
        client.queue("detect_faces", client_error("InvalidImageFormatException", "DetectFaces"))

        with pytest.raises(ProviderError, match="not supported"):
            await provider.detect_faces(b"image")

    async def test_transport_error_is_provider_error(self, provider, client):
        client.queue("detect_faces", EndpointConnectionError(endpoint_url="https://rekognition"))

        with pytest.raises(ProviderError) as exc_info:
            await provider.detect_faces(b"image")

        assert str(exc_info.value) == "Could not reach the face service"
        assert "https://rekognition" not in str(exc_info.value)

    async def test_slow_call_times_out(self, client):
        provider = RekognitionVisionProvider(collection_id="TestFaces", timeout=0.01, client=client)
        client.delay = 0.5
        client.queue("detect_faces", {"FaceDetails": []})

        with pytest.raises(ProviderTimeout):
            await provider.detect_faces(b"image")


class TestSearchFace:
    """Gallery search mapping."""

    async def test_returns_best_match(self, provider, client):
        client.queue("search_faces_by_image", {
            "FaceMatches": [
                {"Similarity": 91.5, "Face": {"FaceId": "f1", "ExternalImageId": "E001"}},
            ]
        })

        match = await provider.search_face(b"crop", max_results=1, min_similarity=80.0)

        assert match.external_id == "E001"
        assert match.similarity == 91.5
        params = client.calls[0][1]
        assert params["CollectionId"] == "TestFaces"
        assert params["MaxFaces"] == 1
        assert params["FaceMatchThreshold"] == 80.0

    async def test_defaults_to_configured_threshold(self, provider, client):
        client.queue("search_faces_by_image", {"FaceMatches": []})

        assert await provider.search_face(b"crop") is None
        assert client.calls[0][1]["FaceMatchThreshold"] == 75.0

    async def test_match_without_external_id_is_ignored(self, provider, client):
        client.queue("search_faces_by_image", {
            "FaceMatches": [{"Similarity": 99.0, "Face": {"FaceId": "f1"}}]
        })

        assert await provider.search_face(b"crop") is None

    async def test_crop_without_face_is_no_match(self, provider, client):
        client.queue(
            "search_faces_by_image",
            client_error("InvalidParameterException", "SearchFacesByImage", "There are no faces in the image.")
        )

        assert await provider.search_face(b"crop") is None

    async def test_missing_gallery(self, provider, client):
        client.queue("search_faces_by_image", client_error("ResourceNotFoundException", "SearchFacesByImage"))

        with pytest.raises(GalleryNotFoundError):
            await provider.search_face(b"crop")


class TestIndexFace:
    """Enrollment indexing."""

    async def test_indexes_under_external_id(self, provider, client):
        client.queue("index_faces", {"FaceRecords": [{"Face": {"FaceId": "f1", "ExternalImageId": "E001"}}]})

        await provider.index_face(b"photo", "E001")

        params = client.calls[0][1]
        assert params["ExternalImageId"] == "E001"
        assert params["CollectionId"] == "TestFaces"
        assert params["MaxFaces"] == 1

    async def test_no_indexed_face(self, provider, client):
        client.queue("index_faces", {
            "FaceRecords": [],
            "UnindexedFaces": [{"Reasons": ["LOW_BRIGHTNESS", "SMALL_BOUNDING_BOX"]}],
        })

        with pytest.raises(NoFaceDetectedError) as exc_info:
            await provider.index_face(b"photo", "E001")

        assert exc_info.value.details["reasons"] == ["LOW_BRIGHTNESS", "SMALL_BOUNDING_BOX"]

    async def test_throttling_is_provider_error(self, provider, client):
        client.queue("index_faces", client_error("ProvisionedThroughputExceededException", "IndexFaces"))

        with pytest.raises(ProviderError):
            await provider.index_face(b"photo", "E001")


class TestListEnrolledIds:
    """Paginated listing of enrolled external ids."""

    async def test_paginates_and_deduplicates(self, provider, client):
        client.queue("list_faces", {
            "Faces": [{"ExternalImageId": "E001"}, {"ExternalImageId": "E002"}],
            "NextToken": "page-2",
        })
        client.queue("list_faces", {
            "Faces": [{"ExternalImageId": "E001"}, {"FaceId": "no-external-id"}],
        })

        assert await provider.list_enrolled_ids() == {"E001", "E002"}
        assert "NextToken" not in client.calls[0][1]
        assert client.calls[1][1]["NextToken"] == "page-2"

    async def test_empty_gallery(self, provider, client):
        client.queue("list_faces", {"Faces": []})
        assert await provider.list_enrolled_ids() == set()

    async def test_missing_gallery(self, provider, client):
        client.queue("list_faces", client_error("ResourceNotFoundException", "ListFaces"))

        with pytest.raises(GalleryNotFoundError):
            await provider.list_enrolled_ids()

    async def test_slow_listing_times_out(self, client):
        provider = RekognitionVisionProvider(collection_id="TestFaces", timeout=0.01, client=client)
        client.delay = 0.5
        client.queue("list_faces", {"Faces": []})

        with pytest.raises(ProviderTimeout):
            await provider.list_enrolled_ids()
