"""FastAPI dependency providers."""
from typing import AsyncGenerator

from fastapi import Depends

from attendance.core.container import ServiceContainer, container
from attendance.core.exceptions import ServiceNotInitializedError
from attendance.domain.interfaces.storage.identity_store import IdentityStore
from attendance.domain.interfaces.vision.provider import VisionProvider
from attendance.services.enrollment import EnrollmentService
from attendance.services.recognition import RecognitionService


async def get_container() -> ServiceContainer:
    """Dependency provider for the global ServiceContainer instance."""
    if not container.initialized:
        try:
            await container.initialize()
        except Exception as e:
            raise ServiceNotInitializedError(f"Service container could not be initialized: {e}") from e
    return container


async def get_identity_store(
    cont: ServiceContainer = Depends(get_container),
) -> AsyncGenerator[IdentityStore, None]:
    """Provide the initialized identity store.

    Raises:
        ServiceNotInitializedError: If the store is not initialized
    """
    if cont.identity_store is None:
        raise ServiceNotInitializedError("Identity store not initialized")
    yield cont.identity_store


async def get_vision_provider(
    cont: ServiceContainer = Depends(get_container),
) -> AsyncGenerator[VisionProvider, None]:
    """Provide the initialized vision provider.

    Raises:
        ServiceNotInitializedError: If the provider is not initialized
    """
    if cont.vision_provider is None:
        raise ServiceNotInitializedError("Vision provider not initialized")
    yield cont.vision_provider


async def get_recognition_service(
    cont: ServiceContainer = Depends(get_container),
) -> AsyncGenerator[RecognitionService, None]:
    """Dependency provider for RecognitionService."""
    if cont.recognition_service is None:
        raise ServiceNotInitializedError("RecognitionService not found in initialized container")
    yield cont.recognition_service


async def get_enrollment_service(
    cont: ServiceContainer = Depends(get_container),
) -> AsyncGenerator[EnrollmentService, None]:
    """Dependency provider for EnrollmentService."""
    if cont.enrollment_service is None:
        raise ServiceNotInitializedError("EnrollmentService not found in initialized container")
    yield cont.enrollment_service
