"""Value objects package."""
from .recognition import PixelRect, ProviderMatch

__all__ = ["PixelRect", "ProviderMatch"]
