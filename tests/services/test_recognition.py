"""Tests for the recognition service."""
import pytest

from attendance.core.exceptions import (
    InvalidImageError,
    ProviderError,
    ProviderTimeout,
    StoreError,
)
from attendance.domain.entities.face import BoundingBox
from attendance.domain.value_objects.recognition import ProviderMatch
from attendance.services.recognition import RecognitionService
from tests.fakes import FakeIdentityStore, FakeVisionProvider

LEFT_FACE = BoundingBox(left=0.1, top=0.2, width=0.2, height=0.3)
RIGHT_FACE = BoundingBox(left=0.6, top=0.2, width=0.2, height=0.3)
MIDDLE_FACE = BoundingBox(left=0.35, top=0.5, width=0.2, height=0.3)


def make_service(provider, store, **kwargs) -> RecognitionService:
    return RecognitionService(provider=provider, store=store, similarity_threshold=75.0, **kwargs)


class TestRecognize:
    """Recognition of faces in a submitted photo."""

    async def test_no_faces_returns_empty_list(self, sample_image, fake_store):
        provider = FakeVisionProvider(boxes=[])

        faces = await make_service(provider, fake_store).recognize(sample_image)

        assert faces == []
        assert provider.search_calls == []
        assert fake_store.records == []

    async def test_matched_and_unmatched_faces(self, sample_image, fake_store):
        await fake_store.upsert_identity("E001", "Ada")
        provider = FakeVisionProvider(
            boxes=[LEFT_FACE, RIGHT_FACE],
            search_outcomes=[ProviderMatch(external_id="E001", similarity=90.0), None],
        )

        faces = await make_service(provider, fake_store).recognize(sample_image)

        assert [face.bounding_box for face in faces] == [LEFT_FACE, RIGHT_FACE]
        assert faces[0].match.external_id == "E001"
        assert faces[0].match.display_name == "Ada"
        assert faces[0].match.similarity == 90.0
        assert faces[1].match is None
        assert [record.external_id for record in fake_store.records] == ["E001"]

    async def test_search_uses_threshold_and_single_result(self, sample_image, fake_store):
        provider = FakeVisionProvider(boxes=[LEFT_FACE])

        await make_service(provider, fake_store).recognize(sample_image)

        assert provider.search_calls[0]["max_results"] == 1
        assert provider.search_calls[0]["min_similarity"] == 75.0
        assert provider.search_calls[0]["image_bytes"] != sample_image

    async def test_match_below_threshold_is_ignored(self, sample_image, fake_store):
        provider = FakeVisionProvider(
            boxes=[LEFT_FACE],
            search_outcomes=[ProviderMatch(external_id="E001", similarity=60.0)],
        )

        faces = await make_service(provider, fake_store).recognize(sample_image)

        assert faces[0].match is None
        assert fake_store.records == []

    async def test_match_without_identity_is_unknown(self, sample_image, fake_store):
        provider = FakeVisionProvider(
            boxes=[LEFT_FACE],
            search_outcomes=[ProviderMatch(external_id="E404", similarity=99.0)],
        )

        faces = await make_service(provider, fake_store).recognize(sample_image)

        assert faces[0].match.display_name == "Unknown"
        assert faces[0].match.external_id == "E404"
        assert [record.external_id for record in fake_store.records] == ["E404"]

    async def test_every_match_is_recorded(self, sample_image, fake_store):
        await fake_store.upsert_identity("E001", "Ada")
        provider = FakeVisionProvider(
            boxes=[LEFT_FACE, RIGHT_FACE],
            search_outcomes=[
                ProviderMatch(external_id="E001", similarity=95.0),
                ProviderMatch(external_id="E001", similarity=88.0),
            ],
        )

        await make_service(provider, fake_store).recognize(sample_image)

        assert [record.external_id for record in fake_store.records] == ["E001", "E001"]


class TestPerFaceFailures:
    """Failures on one face do not discard the others."""

    async def test_search_failure_downgrades_to_no_match(self, sample_image, fake_store):
        await fake_store.upsert_identity("E002", "Grace")
        provider = FakeVisionProvider(
            boxes=[LEFT_FACE, RIGHT_FACE],
            search_outcomes=[
                ProviderError("throttled"),
                ProviderMatch(external_id="E002", similarity=80.0),
            ],
        )

        faces = await make_service(provider, fake_store).recognize(sample_image)

        assert faces[0].match is None
        assert faces[1].match.display_name == "Grace"
        assert [record.external_id for record in fake_store.records] == ["E002"]

    async def test_search_timeout_downgrades_to_no_match(self, sample_image, fake_store):
        provider = FakeVisionProvider(boxes=[LEFT_FACE], search_outcomes=[ProviderTimeout("slow")])

        faces = await make_service(provider, fake_store).recognize(sample_image)

        assert len(faces) == 1
        assert faces[0].match is None

    async def test_degenerate_box_is_not_searched(self, sample_image, fake_store):
        await fake_store.upsert_identity("E001", "Ada")
        outside = BoundingBox(left=1.2, top=0.2, width=0.1, height=0.1)
        provider = FakeVisionProvider(
            boxes=[outside, LEFT_FACE],
            search_outcomes=[ProviderMatch(external_id="E001", similarity=91.0)],
        )

        faces = await make_service(provider, fake_store).recognize(sample_image)

        assert len(provider.search_calls) == 1
        assert faces[0].bounding_box == outside
        assert faces[0].match is None
        assert faces[1].match.external_id == "E001"


class TestRequestFailures:
    """Failures that abort the whole call."""

    async def test_invalid_image_is_rejected_before_detection(self, fake_store):
        provider = FakeVisionProvider(boxes=[LEFT_FACE])

        with pytest.raises(InvalidImageError):
            await make_service(provider, fake_store).recognize(b"garbage")

        assert provider.detect_calls == 0

    async def test_detection_failure_propagates(self, sample_image, fake_store):
        provider = FakeVisionProvider(detect_error=ProviderError("service unavailable"))

        with pytest.raises(ProviderError):
            await make_service(provider, fake_store).recognize(sample_image)

        assert fake_store.records == []

    async def test_attendance_write_failure_propagates(self, sample_image):
        store = FakeIdentityStore(write_error=StoreError("disk full"))
        provider = FakeVisionProvider(
            boxes=[LEFT_FACE],
            search_outcomes=[ProviderMatch(external_id="E001", similarity=90.0)],
        )

        with pytest.raises(StoreError):
            await make_service(provider, store).recognize(sample_image)


class TestConcurrency:
    """Bounded concurrent searches keep detection order."""

    async def test_results_and_records_follow_detection_order(self, sample_image, fake_store):
        provider = FakeVisionProvider(
            boxes=[LEFT_FACE, MIDDLE_FACE, RIGHT_FACE],
            search_outcomes=[
                ProviderMatch(external_id="E001", similarity=90.0),
                ProviderMatch(external_id="E002", similarity=90.0),
                ProviderMatch(external_id="E003", similarity=90.0),
            ],
            search_delays=[0.05, 0.02, 0.0],
        )

        faces = await make_service(provider, fake_store, concurrency=3).recognize(sample_image)

        assert [face.bounding_box for face in faces] == [LEFT_FACE, MIDDLE_FACE, RIGHT_FACE]
        assert [face.match.external_id for face in faces] == ["E001", "E002", "E003"]
        assert [record.external_id for record in fake_store.records] == ["E001", "E002", "E003"]

    def test_concurrency_is_at_least_one(self, fake_provider, fake_store):
        assert make_service(fake_provider, fake_store, concurrency=0).concurrency == 1
