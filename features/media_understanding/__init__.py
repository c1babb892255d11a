"""Media understanding: run audio, image and video capabilities over inbound attachments."""

from .routes import router
from .service import MediaUnderstandingService, build_default_service

__all__ = ["router", "MediaUnderstandingService", "build_default_service"]
