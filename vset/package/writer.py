"""Serialize merged manifests to their final text forms."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping

from .models import META_PREFIX
from .utils import write_text
from .xmlbuilder import build_xml


def remove_meta_keys(manifest: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a shallow copy of ``manifest`` without internal ``__meta_`` keys."""

    return {key: value for key, value in manifest.items() if not key.startswith(META_PREFIX)}


class ManifestWriter:
    """Writes the service manifest (JSON) and package manifest (XML)."""

    def __init__(self, vso_manifest: Mapping[str, Any], vsix_manifest: Mapping[str, Any]) -> None:
        self.vso_manifest = remove_meta_keys(vso_manifest)
        self.vsix_manifest = remove_meta_keys(vsix_manifest)

    def vso_text(self) -> str:
        return json.dumps(self.vso_manifest, indent=4, ensure_ascii=False)

    def vsix_text(self) -> str:
        return build_xml(self.vsix_manifest)

    def write_manifests(self, vso_path: Path, vsix_path: Path) -> None:
        write_text(vso_path, self.vso_text())
        write_text(vsix_path, self.vsix_text())
