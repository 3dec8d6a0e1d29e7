"""Gallery publishing helpers."""

from .errors import NOT_AUTHORIZED_MESSAGE, error_from_response, translate_error
from .gallery import GalleryClient
from .models import PublishResult
from .publish import publish_vsix

__all__ = [
    "GalleryClient",
    "NOT_AUTHORIZED_MESSAGE",
    "PublishResult",
    "error_from_response",
    "publish_vsix",
    "translate_error",
]
