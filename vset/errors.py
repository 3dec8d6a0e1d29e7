"""Exception types raised by the packaging and publishing pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional


class VsetError(RuntimeError):
    """Base class for errors surfaced to the command line."""


class MalformedManifestError(VsetError):
    """Raised when a partial manifest cannot be parsed."""

    def __init__(self, path: Path, content: str, reason: str) -> None:
        self.path = path
        self.content = content
        self.reason = reason
        super().__init__(f"Error parsing the JSON in {path}: {reason}\n{content}")


class ManifestSchemaError(VsetError):
    """Raised when a partial manifest declares an invalid asset."""


class MissingContextError(VsetError):
    """Raised when an archive is assembled without a package root."""


class SettingsError(VsetError):
    """Raised when settings cannot be loaded or validated."""


class GalleryError(VsetError):
    """Raised when a gallery request fails."""

    def __init__(self, detail: Any, *, status_code: Optional[int] = None) -> None:
        self.detail = detail
        self.status_code = status_code
        super().__init__(detail if isinstance(detail, str) else repr(detail))


__all__ = [
    "GalleryError",
    "MalformedManifestError",
    "ManifestSchemaError",
    "MissingContextError",
    "SettingsError",
    "VsetError",
]
