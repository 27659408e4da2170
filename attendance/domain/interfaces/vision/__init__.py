from .provider import VisionProvider

__all__ = ["VisionProvider"]
