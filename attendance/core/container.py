"""Service container for dependency injection."""
from typing import Optional

from attendance.core.config import Settings, settings as default_settings
from attendance.core.logging import get_logger
from attendance.domain.interfaces.storage.identity_store import IdentityStore
from attendance.domain.interfaces.vision.provider import VisionProvider
from attendance.infrastructure.database import SqlIdentityStore
from attendance.infrastructure.vision import RekognitionVisionProvider
from attendance.services.enrollment import EnrollmentService
from attendance.services.recognition import RecognitionService

logger = get_logger(__name__)


class ServiceContainer:
    """Container for application services.

    Builds the process-wide identity store and vision provider once and hands
    them to the services that need them. Nothing else in the application
    constructs these objects.

    Example:
        ```python
        container = ServiceContainer()
        await container.initialize()

        faces = await container.recognition_service.recognize(image_bytes)
        ```
    """

    def __init__(self, config: Optional[Settings] = None) -> None:
        """Initialize empty container."""
        self.settings = config or default_settings

        # Core services - Use interface type hints
        self.identity_store: Optional[IdentityStore] = None
        self.vision_provider: Optional[VisionProvider] = None

        # Domain services (depend on interfaces)
        self.recognition_service: Optional[RecognitionService] = None
        self.enrollment_service: Optional[EnrollmentService] = None

    @property
    def initialized(self) -> bool:
        return self.recognition_service is not None

    async def initialize(self) -> None:
        """Initialize all services in the correct order."""
        if self.initialized:
            return

        store = SqlIdentityStore.from_url(
            self.settings.DATABASE_URL,
            echo=self.settings.DEBUG
        )
        await store.initialize()

        provider = RekognitionVisionProvider(
            collection_id=self.settings.COLLECTION_ID,
            similarity_threshold=self.settings.SIMILARITY_THRESHOLD,
            region_name=self.settings.AWS_REGION,
            access_key_id=self.settings.AWS_ACCESS_KEY_ID,
            secret_access_key=self.settings.AWS_SECRET_ACCESS_KEY,
            timeout=self.settings.PROVIDER_TIMEOUT,
            max_attempts=self.settings.PROVIDER_MAX_ATTEMPTS,
            index_max_faces=self.settings.INDEX_MAX_FACES,
        )
        await provider.initialize()
        await provider.ensure_gallery()

        self.identity_store = store
        self.vision_provider = provider
        self.recognition_service = RecognitionService(
            provider=provider,
            store=store,
            similarity_threshold=self.settings.SIMILARITY_THRESHOLD,
            concurrency=self.settings.RECOGNITION_CONCURRENCY,
        )
        self.enrollment_service = EnrollmentService(provider=provider, store=store)
        logger.info(
            "Initialized services",
            collection_id=self.settings.COLLECTION_ID,
            similarity_threshold=self.settings.SIMILARITY_THRESHOLD
        )

    async def cleanup(self) -> None:
        """Cleanup all services in reverse order of initialization."""
        self.recognition_service = None
        self.enrollment_service = None

        if isinstance(self.vision_provider, RekognitionVisionProvider):
            await self.vision_provider.cleanup()
        self.vision_provider = None

        if isinstance(self.identity_store, SqlIdentityStore):
            await self.identity_store.close()
        self.identity_store = None


# Global container instance
container = ServiceContainer()
