"""Bounding box to rendering surface coordinate mapping."""
from attendance.domain.entities.face import BoundingBox
from attendance.domain.value_objects.recognition import PixelRect


def to_pixel_rect(box: BoundingBox, surface_width: float, surface_height: float) -> PixelRect:
    """Map a fractional bounding box onto a rendering surface.

    The surface size must be the size the image is displayed at, not its
    native resolution, or overlays drift whenever the image is scaled.

    Args:
        box: Bounding box as fractions of the image size
        surface_width: Displayed width of the image
        surface_height: Displayed height of the image

    Returns:
        PixelRect: Unrounded rectangle in surface pixels
    """
    return PixelRect(
        x=box.left * surface_width,
        y=box.top * surface_height,
        width=box.width * surface_width,
        height=box.height * surface_height,
    )
