"""Service interfaces package."""
from .storage import IdentityStore
from .vision import VisionProvider

__all__ = ["IdentityStore", "VisionProvider"]
