"""CLI tool for recognizing faces in a local image with an annotated copy."""
import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np

from attendance.core.container import ServiceContainer
from attendance.core.logging import get_logger, setup_logging
from attendance.core.utils.coordinates import to_pixel_rect
from attendance.domain.entities.face import DetectedFace

logger = get_logger(__name__)

MATCH_COLOR = (0, 255, 0)
UNKNOWN_COLOR = (0, 0, 255)
TEXT_COLOR = (255, 255, 255)


def draw_faces(image: np.ndarray, faces: List[DetectedFace]) -> np.ndarray:
    """
    Draw a box and label for every face on a copy of the image.

    Args:
        image: Original image as numpy array
        faces: Recognition results for the image

    Returns:
        Annotated copy of the image
    """
    img_draw = image.copy()
    height, width = img_draw.shape[:2]

    font_scale = 0.6
    thickness = 2
    padding = 6

    for face in faces:
        rect = to_pixel_rect(face.bounding_box, width, height)
        x1, y1 = int(rect.x), int(rect.y)
        x2, y2 = int(rect.x + rect.width), int(rect.y + rect.height)

        color = MATCH_COLOR if face.match else UNKNOWN_COLOR
        cv2.rectangle(img_draw, (x1, y1), (x2, y2), color, 3)

        if face.match:
            label = f"{face.match.display_name} ({face.match.similarity:.1f}%)"
        else:
            label = "Unknown Face"

        (text_width, text_height), _ = cv2.getTextSize(
            label, cv2.FONT_HERSHEY_SIMPLEX, font_scale, thickness
        )
        label_top = max(0, y1 - text_height - padding * 2)
        cv2.rectangle(
            img_draw,
            (x1, label_top),
            (x1 + text_width + padding, label_top + text_height + padding * 2),
            color,
            -1
        )
        cv2.putText(
            img_draw,
            label,
            (x1 + padding // 2, label_top + text_height + padding),
            cv2.FONT_HERSHEY_SIMPLEX,
            font_scale,
            TEXT_COLOR,
            thickness
        )

    return img_draw


async def recognize_image(image_path: str, output_path: Optional[str] = None, save_output: bool = True) -> None:
    """
    Recognize faces in an image, record attendance and save an annotated copy.

    Args:
        image_path: Path to the image file
        output_path: Where to write the annotated image, next to the input by default
        save_output: Whether to save the annotated image
    """
    image_file = Path(image_path)
    if not image_file.exists():
        logger.error("Image file not found", path=image_path)
        sys.exit(1)

    image_bytes = image_file.read_bytes()

    container = ServiceContainer()
    try:
        await container.initialize()
        faces = await container.recognition_service.recognize(image_bytes)
    except Exception as e:
        logger.error("Recognition failed", error=str(e), exc_info=True)
        sys.exit(1)
    finally:
        await container.cleanup()

    logger.info("Recognition completed", num_faces=len(faces), image_path=image_path)
    for i, face in enumerate(faces, 1):
        logger.info(
            f"Face {i} details",
            name=face.match.display_name if face.match else None,
            usn=face.match.external_id if face.match else None,
            similarity=f"{face.match.similarity:.1f}%" if face.match else None,
            position={
                "left": f"{face.bounding_box.left:.3f}",
                "top": f"{face.bounding_box.top:.3f}",
                "width": f"{face.bounding_box.width:.3f}",
                "height": f"{face.bounding_box.height:.3f}"
            }
        )

    if not save_output or not faces:
        return

    img = cv2.imread(str(image_file))
    if img is None:
        logger.error("Failed to load image for visualization", path=image_path)
        sys.exit(1)

    target = Path(output_path) if output_path else (
        image_file.parent / f"{image_file.stem}_recognized{image_file.suffix}"
    )
    cv2.imwrite(str(target), draw_faces(img, faces))
    logger.info("Saved annotated image", path=str(target))


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Recognize enrolled faces in an image and record attendance"
    )
    parser.add_argument("image_path", help="Path to the image file")
    parser.add_argument("--output", help="Path for the annotated image")
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Don't save the annotated image"
    )
    args = parser.parse_args()

    setup_logging()
    asyncio.run(recognize_image(args.image_path, args.output, not args.no_save))


if __name__ == "__main__":
    main()
