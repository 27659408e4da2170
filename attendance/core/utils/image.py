"""
Image processing utility functions.
"""
import math
from typing import Tuple

import cv2
import numpy as np

from attendance.core.exceptions import InvalidImageError, InvalidRegionError
from attendance.domain.entities.face import BoundingBox


def bytes_to_numpy_array(image_bytes: bytes, flags: int = cv2.IMREAD_COLOR) -> np.ndarray:
    """Convert image bytes to a numpy array.

    Args:
        image_bytes: Raw image bytes
        flags: OpenCV imread flags (default: COLOR)

    Returns:
        numpy.ndarray: Image as a numpy array

    Raises:
        InvalidImageError: If the image cannot be decoded
    """
    if not image_bytes:
        raise InvalidImageError("Empty image data")

    np_array = np.frombuffer(image_bytes, np.uint8)
    img = cv2.imdecode(np_array, flags)

    if img is None:
        raise InvalidImageError("Failed to decode image bytes")

    return img


def pixel_region(box: BoundingBox, image_width: int, image_height: int) -> Tuple[int, int, int, int]:
    """Map a fractional bounding box to a (left, top, width, height) pixel region.

    Edges reported past the image border are clamped so the region always
    lies inside the image.

    Raises:
        InvalidRegionError: If the clamped region has no area
    """
    left = max(0, math.floor(box.left * image_width))
    top = max(0, math.floor(box.top * image_height))
    width = min(image_width - left, math.floor(box.width * image_width))
    height = min(image_height - top, math.floor(box.height * image_height))

    if width <= 0 or height <= 0:
        raise InvalidRegionError(
            "Bounding box maps to an empty region",
            details={"left": left, "top": top, "width": width, "height": height}
        )
    return left, top, width, height


def crop_region(img: np.ndarray, box: BoundingBox, ext: str = ".jpg") -> bytes:
    """Crop a decoded image to a bounding box and encode the result.

    Args:
        img: Decoded image as returned by bytes_to_numpy_array
        box: Face bounding box as fractions of the image size
        ext: Output encoding understood by cv2.imencode

    Returns:
        bytes: Encoded crop

    Raises:
        InvalidRegionError: If the region is empty or cannot be encoded
    """
    image_height, image_width = img.shape[:2]
    left, top, width, height = pixel_region(box, image_width, image_height)

    crop = img[top:top + height, left:left + width]
    ok, buffer = cv2.imencode(ext, crop)
    if not ok:
        raise InvalidRegionError(f"Failed to encode cropped region as {ext}")
    return buffer.tobytes()


def crop_face(image_bytes: bytes, box: BoundingBox) -> bytes:
    """Crop the face described by box out of an encoded image.

    Raises:
        InvalidImageError: If the image cannot be decoded
        InvalidRegionError: If the box maps to an empty region
    """
    return crop_region(bytes_to_numpy_array(image_bytes), box)
