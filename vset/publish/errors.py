"""Translate gallery error responses into user-facing messages."""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional

from requests import Response

from ..errors import GalleryError

NOT_AUTHORIZED_MESSAGE = (
    "Received response 401 (Not Authorized). Check that your personal access "
    "token is correct and hasn't expired."
)


def translate_error(error: Any) -> Any:
    """Return the most useful message carried by a gallery error.

    ``error`` is either a mapping with ``statusCode`` / ``body`` keys or its
    JSON text. A 401 status maps to a fixed credential message; otherwise a
    ``message`` field of the (possibly JSON-encoded) body wins, falling back
    to the raw body.
    """

    if isinstance(error, (str, bytes)):
        try:
            error = json.loads(error)
        except ValueError:
            return error.decode("utf-8", errors="replace") if isinstance(error, bytes) else error
    if not isinstance(error, Mapping):
        return error

    if error.get("statusCode") == 401:
        return NOT_AUTHORIZED_MESSAGE

    body = error.get("body")
    if isinstance(body, (str, bytes)) and body:
        try:
            body = json.loads(body)
        except ValueError:
            return body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
    if isinstance(body, Mapping) and body.get("message"):
        return body["message"]
    return body


def error_from_response(response: Response) -> GalleryError:
    """Build a :class:`GalleryError` for a non-success gallery response."""

    status: Optional[int] = response.status_code
    detail = translate_error({"statusCode": status, "body": response.text or response.reason})
    if not detail:
        detail = f"Gallery request returned {status}"
    return GalleryError(detail, status_code=status)
