"""Tests for image cropping helpers."""
import cv2
import numpy as np
import pytest

from attendance.core.exceptions import InvalidImageError, InvalidRegionError
from attendance.core.utils.image import (
    bytes_to_numpy_array,
    crop_face,
    pixel_region,
)
from attendance.domain.entities.face import BoundingBox
from tests.fakes import encode_image


def decode(image_bytes: bytes) -> np.ndarray:
    return cv2.imdecode(np.frombuffer(image_bytes, np.uint8), cv2.IMREAD_COLOR)


class TestPixelRegion:
    """Bounding box to pixel region mapping."""

    def test_inside_image(self):
        box = BoundingBox(left=0.25, top=0.5, width=0.25, height=0.25)
        assert pixel_region(box, 800, 600) == (200, 300, 200, 150)

    def test_floors_fractional_pixels(self):
        box = BoundingBox(left=0.1, top=0.1, width=0.1, height=0.1)
        assert pixel_region(box, 805, 605) == (80, 60, 80, 60)

    def test_clamps_box_past_right_and_bottom_edges(self):
        box = BoundingBox(left=0.75, top=0.75, width=0.5, height=0.5)
        assert pixel_region(box, 800, 600) == (600, 450, 200, 150)

    def test_clamps_negative_origin(self):
        box = BoundingBox(left=-0.05, top=-0.1, width=0.25, height=0.5)
        assert pixel_region(box, 800, 600) == (0, 0, 200, 300)

    def test_box_outside_image_is_rejected(self):
        box = BoundingBox(left=1.0, top=0.5, width=0.25, height=0.25)
        with pytest.raises(InvalidRegionError):
            pixel_region(box, 800, 600)

    def test_zero_size_box_is_rejected(self):
        box = BoundingBox(left=0.5, top=0.5, width=0.0, height=0.25)
        with pytest.raises(InvalidRegionError):
            pixel_region(box, 800, 600)


class TestCropFace:
    """Cropping a face out of encoded image bytes."""

    def test_crop_has_region_size(self):
        crop = crop_face(encode_image(800, 600), BoundingBox(left=0.25, top=0.5, width=0.25, height=0.25))
        assert decode(crop).shape[:2] == (150, 200)

    def test_crop_at_edge_is_clamped(self):
        crop = crop_face(encode_image(800, 600), BoundingBox(left=0.75, top=0.0, width=0.5, height=1.5))
        assert decode(crop).shape[:2] == (600, 200)

    def test_undecodable_image(self):
        with pytest.raises(InvalidImageError):
            crop_face(b"not an image", BoundingBox(left=0.0, top=0.0, width=0.5, height=0.5))


def test_empty_bytes_are_invalid():
    with pytest.raises(InvalidImageError):
        bytes_to_numpy_array(b"")
