"""Enrollment service registering people in the identity store and face gallery."""
import re
from typing import List, Optional

from attendance.core.exceptions import ProviderError, ValidationError
from attendance.core.logging import get_logger
from attendance.domain.interfaces.storage.identity_store import IdentityStore
from attendance.domain.interfaces.vision.provider import VisionProvider

logger = get_logger(__name__)

# Characters Rekognition accepts in ExternalImageId
EXTERNAL_ID_PATTERN = re.compile(r"^[A-Za-z0-9_.\-:]+$")
MAX_EXTERNAL_ID_LENGTH = 255


def normalize_external_id(external_id: str) -> str:
    """Canonical form of an external id, shared by identities and attendance rows."""
    return external_id.strip().upper()


class EnrollmentService:
    """Service for enrolling a person from one or more photos.

    The identity is saved first, then each photo is indexed in order. A photo
    that fails to index stops enrollment with that error; photos indexed
    before it stay in the gallery.
    """

    def __init__(self, provider: VisionProvider, store: IdentityStore) -> None:
        self.provider = provider
        self.store = store

    async def enroll(
        self,
        display_name: Optional[str],
        external_id: Optional[str],
        photos: List[bytes],
    ) -> str:
        """Enroll a person.

        Args:
            display_name: Name shown when the person is recognized
            external_id: Stable identifier, such as a registration number
            photos: Encoded photos of the person

        Returns:
            Confirmation message

        Raises:
            ValidationError: If the name, id or photos are missing, or the id is malformed
            NoFaceDetectedError: If a photo has no usable face
            ProviderError: If indexing fails
            StoreError: If the identity cannot be saved
        """
        display_name = (display_name or "").strip()
        photos = [photo for photo in photos or [] if photo]
        if not display_name or not (external_id or "").strip() or not photos:
            raise ValidationError("Missing name, USN, or photos")

        external_id = normalize_external_id(external_id)
        if len(external_id) > MAX_EXTERNAL_ID_LENGTH or not EXTERNAL_ID_PATTERN.match(external_id):
            raise ValidationError(
                "USN may only contain letters, digits, '_', '.', '-' and ':'",
                details={"external_id": external_id}
            )

        await self.store.upsert_identity(external_id, display_name)

        for index, photo in enumerate(photos, 1):
            logger.debug("Indexing enrollment photo", external_id=external_id, photo=index, photos=len(photos))
            try:
                await self.provider.index_face(photo, external_id)
            except ProviderError as e:
                logger.error(
                    "Enrollment photo failed to index",
                    external_id=external_id,
                    photo=index,
                    indexed=index - 1,
                    error=str(e)
                )
                raise type(e)(
                    f"Photo {index}: {e.message}",
                    details={**e.details, "photo": index, "indexed": index - 1}
                ) from e

        logger.info(
            "Successfully registered",
            display_name=display_name,
            external_id=external_id,
            photos=len(photos)
        )
        return f"Student {display_name} registered successfully."
