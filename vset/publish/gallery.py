"""HTTP client for the extension gallery."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import requests
from requests import Response, Session
from requests.exceptions import RequestException

from ..errors import GalleryError
from ..schemas.gallery import Publisher
from .errors import error_from_response

logger = logging.getLogger(__name__)

API_VERSION = "3.0-preview.1"
DEFAULT_TIMEOUT = 60


class GalleryClient:
    """Publishes VSIX packages and manages publishers on a gallery."""

    def __init__(
        self,
        gallery_url: str,
        token: Optional[str],
        *,
        session: Optional[Session] = None,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        self.gallery_url = gallery_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    def publish_extension(self, vsix_path: Path) -> Dict[str, Any]:
        """Upload a VSIX package and return the gallery's extension payload."""

        data = Path(vsix_path).read_bytes()
        logger.info("Uploading %s (%d bytes) to %s", vsix_path, len(data), self.gallery_url)
        response = self._request(
            "POST",
            "_apis/gallery/extensions",
            data=data,
            headers={"Content-Type": "application/octet-stream"},
        )
        return _json_or_empty(response)

    def create_publisher(self, name: str, display_name: str, description: str) -> Publisher:
        payload = {
            "publisherName": name,
            "displayName": display_name,
            "description": description,
        }
        response = self._request("POST", "_apis/gallery/publishers", json=payload)
        body = _json_or_empty(response)
        return Publisher.model_validate({**payload, **body})

    def delete_publisher(self, name: str) -> None:
        self._request("DELETE", f"_apis/gallery/publishers/{name}")

    def _request(self, method: str, path: str, **kwargs: Any) -> Response:
        if not self.token:
            raise GalleryError("A personal access token is required. Pass --token or set VSET_TOKEN.")
        headers = {"Accept": f"application/json;api-version={API_VERSION}"}
        headers.update(kwargs.pop("headers", None) or {})
        url = f"{self.gallery_url}/{path}"
        logger.debug("%s %s", method, url)
        try:
            response: Response = self.session.request(
                method,
                url,
                auth=("", self.token),
                headers=headers,
                timeout=self.timeout,
                **kwargs,
            )
        except RequestException as exc:
            raise GalleryError(f"Gallery request failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise error_from_response(response)
        return response


def _json_or_empty(response: Response) -> Dict[str, Any]:
    if not response.content:
        return {}
    try:
        payload = response.json()
    except ValueError:
        return {}
    return payload if isinstance(payload, dict) else {"value": payload}
