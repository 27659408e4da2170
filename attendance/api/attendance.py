"""Detection, enrollment and attendance API endpoints."""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from attendance.api.models.attendance import (
    DailyCount,
    DetectResponse,
    EnrollResponse,
    ErrorResponse,
)
from attendance.core.config import settings
from attendance.core.exceptions import (
    InvalidImageError,
    NoFaceDetectedError,
    ProviderError,
    ProviderTimeout,
    StoreError,
    ValidationError,
)
from attendance.core.logging import get_logger
from attendance.domain.interfaces.storage.identity_store import IdentityStore
from attendance.domain.interfaces.vision.provider import VisionProvider
from attendance.infrastructure.dependencies import (
    get_enrollment_service,
    get_identity_store,
    get_recognition_service,
    get_vision_provider,
)
from attendance.services.enrollment import EnrollmentService
from attendance.services.recognition import RecognitionService

logger = get_logger(__name__)
router = APIRouter(
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
        502: {"model": ErrorResponse, "description": "Face service failure"},
        504: {"model": ErrorResponse, "description": "Face service timeout"},
    }
)


@router.post(
    "/detect",
    response_model=DetectResponse,
    summary="Recognize faces and record attendance",
    description="Detects every face in a photo, matches each one against the enrolled "
                "gallery and records attendance for each match.",
    responses={
        200: {
            "description": "Faces detected",
            "content": {
                "application/json": {
                    "example": {
                        "results": [
                            {
                                "boundingBox": {"Left": 0.1, "Top": 0.2, "Width": 0.3, "Height": 0.4},
                                "match": {"name": "Ada", "usn": "E001", "similarity": 99.1},
                            },
                            {
                                "boundingBox": {"Left": 0.6, "Top": 0.2, "Width": 0.2, "Height": 0.3},
                                "match": None,
                            },
                        ]
                    }
                }
            },
        },
    },
)
async def detect(
    photo: Optional[UploadFile] = File(None),
    service: RecognitionService = Depends(get_recognition_service)
) -> DetectResponse:
    """Recognize the faces in an uploaded photo.

    Args:
        photo: Uploaded image
        service: Recognition service provided by dependency injection

    Returns:
        DetectResponse with one entry per detected face, in detection order

    Raises:
        HTTPException: If the image is missing or invalid, or processing fails
    """
    image_bytes = await photo.read() if photo is not None else b""
    if not image_bytes:
        raise HTTPException(status_code=400, detail="No image")

    logger.info("Request received at /detect", filename=photo.filename, size=len(image_bytes))
    try:
        faces = await service.recognize(image_bytes)
        return DetectResponse.from_detected_faces(faces)

    except InvalidImageError as e:
        logger.error("Invalid image", error=str(e))
        raise HTTPException(status_code=400, detail="Unable to read image")
    except ProviderTimeout as e:
        logger.error("Face service timed out during detection", error=str(e))
        raise HTTPException(status_code=504, detail=str(e))
    except ProviderError as e:
        logger.error("Face detection failed", error=str(e), details=e.details)
        raise HTTPException(status_code=502, detail=str(e))
    except StoreError as e:
        logger.error("Failed to record attendance", error=str(e))
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.error("Unexpected error during detection", error=str(e), exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="An unexpected error occurred while processing the request"
        )


@router.post(
    "/enroll",
    response_model=EnrollResponse,
    summary="Enroll a person",
    description="Stores the person's name and indexes each photo in the face gallery.",
    responses={
        422: {"model": ErrorResponse, "description": "A photo has no usable face"},
    },
)
async def enroll(
    full_name: Optional[str] = Form(None, alias="fullName"),
    external_id: Optional[str] = Form(None, alias="externalId"),
    usn: Optional[str] = Form(None),
    photos: Optional[List[UploadFile]] = File(None),
    service: EnrollmentService = Depends(get_enrollment_service)
) -> EnrollResponse:
    """Enroll a person from one or more photos.

    ``usn`` is accepted as a fallback name for ``externalId``.
    """
    photo_bytes = [await upload.read() for upload in photos or []]
    try:
        message = await service.enroll(full_name, external_id or usn, photo_bytes)
        return EnrollResponse(message=message)

    except ValidationError as e:
        logger.warning("Rejected enrollment", error=str(e))
        raise HTTPException(status_code=400, detail=str(e))
    except NoFaceDetectedError as e:
        logger.warning("Enrollment photo without a usable face", error=str(e), details=e.details)
        raise HTTPException(status_code=422, detail=str(e))
    except ProviderTimeout as e:
        logger.error("Face service timed out during enrollment", error=str(e))
        raise HTTPException(status_code=504, detail=str(e))
    except ProviderError as e:
        logger.error("Face indexing failed", error=str(e), details=e.details)
        raise HTTPException(status_code=502, detail=str(e))
    except StoreError as e:
        logger.error("Failed to save identity", error=str(e))
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.error("Unexpected error during enrollment", error=str(e), exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="An unexpected error occurred while processing the request"
        )


@router.get(
    "/stats",
    response_model=List[DailyCount],
    summary="Daily attendance counts",
    description="Attendance counts for the most recent days that have attendance, newest first.",
)
async def stats(store: IdentityStore = Depends(get_identity_store)) -> List[DailyCount]:
    try:
        daily = await store.daily_attendance(settings.STATS_DAYS)
    except StoreError as e:
        logger.error("Failed to read attendance stats", error=str(e))
        raise HTTPException(status_code=500, detail=str(e))
    return [DailyCount.from_daily_attendance(stat) for stat in daily]


@router.get(
    "/enrolled-ids",
    response_model=List[str],
    summary="Enrolled external ids",
    description="Distinct external ids of every face in the gallery.",
)
async def enrolled_ids(provider: VisionProvider = Depends(get_vision_provider)) -> List[str]:
    try:
        external_ids = await provider.list_enrolled_ids()
    except ProviderTimeout as e:
        logger.error("Face service timed out listing faces", error=str(e))
        raise HTTPException(status_code=504, detail=str(e))
    except ProviderError as e:
        logger.error("List faces error", error=str(e))
        raise HTTPException(status_code=502, detail=str(e))
    return sorted(external_ids)
