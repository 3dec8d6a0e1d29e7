"""High-level publish workflow."""

from __future__ import annotations

import logging
from typing import Optional

from requests import Session

from ..errors import GalleryError
from ..package.utils import compute_sha256
from ..settings import PublishSettings
from .gallery import GalleryClient
from .models import PublishResult

logger = logging.getLogger(__name__)


def publish_vsix(settings: PublishSettings, *, session: Optional[Session] = None) -> PublishResult:
    """Upload ``settings.vsix_path`` to ``settings.gallery_url``."""

    vsix_path = settings.vsix_path
    if vsix_path is None:
        raise GalleryError("No VSIX package to publish.")
    if not vsix_path.exists():
        raise GalleryError(f"VSIX package not found: {vsix_path}")

    client = GalleryClient(settings.gallery_url, settings.token, session=session)
    extension = client.publish_extension(vsix_path)
    logs = [f"Published {vsix_path} to {client.gallery_url}."]
    logger.info("Published %s to the gallery", vsix_path)
    return PublishResult(
        vsix_path=vsix_path,
        gallery_url=client.gallery_url,
        sha256=compute_sha256(vsix_path),
        extension=extension,
        logs=logs,
    )
