"""VSIX archive assembly."""

from __future__ import annotations

import logging
import os
import posixpath
import tempfile
import zipfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..errors import MissingContextError
from .models import META_ROOT
from .writer import ManifestWriter
from .xmlbuilder import build_xml

logger = logging.getLogger(__name__)

VSO_MANIFEST_FILENAME = "extension.vsomanifest"
VSIX_MANIFEST_FILENAME = "extension.vsixmanifest"
CONTENT_TYPES_FILENAME = "[Content_Types].xml"
VSO_MANIFEST_ASSET_TYPE = "Microsoft.VSO.Manifest"
CONTENT_TYPES_NAMESPACE = "http://schemas.openxmlformats.org/package/2006/content-types"
DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Known file types for the [Content_Types].xml entry.
CONTENT_TYPE_MAP: Dict[str, str] = {
    "txt": "text/plain",
    "pkgdef": "text/plain",
    "xml": "text/xml",
    "vsixmanifest": "text/xml",
    "vsomanifest": "application/json",
    "json": "application/json",
    "htm": "text/html",
    "html": "text/html",
    "rtf": "application/rtf",
    "pdf": "application/pdf",
    "gif": "image/gif",
    "jpg": "image/jpg",
    "jpeg": "image/jpg",
    "tiff": "image/tiff",
    "vsix": "application/zip",
    "zip": "application/zip",
    "dll": "application/octet-stream",
}


def content_types_document(file_names: Iterable[str]) -> Dict[str, Any]:
    """Build the content-type index with one Default per distinct extension."""

    extensions: List[str] = []
    for name in file_names:
        extension = posixpath.splitext(name)[1].lstrip(".")
        if extension not in extensions:
            extensions.append(extension)
    return {
        "Types": {
            "$": {"xmlns": CONTENT_TYPES_NAMESPACE},
            "Default": [
                {
                    "$": {
                        "Extension": extension,
                        "ContentType": CONTENT_TYPE_MAP.get(extension, DEFAULT_CONTENT_TYPE),
                    }
                }
                for extension in extensions
            ],
        }
    }


def content_types_xml(file_names: Iterable[str]) -> str:
    return build_xml(content_types_document(file_names))


class VsixWriter:
    """Packages merged manifests and their assets into a VSIX archive."""

    def __init__(self, vso_manifest: Dict[str, Any], vsix_manifest: Dict[str, Any]) -> None:
        self.vso_manifest = vso_manifest
        self.vsix_manifest = vsix_manifest
        self.prepare_manifests()

    def prepare_manifests(self) -> None:
        """Point the package manifest at the service manifest exactly once."""

        package = self.vsix_manifest.setdefault("PackageManifest", {})
        assets_nodes = package.get("Assets")
        if not isinstance(assets_nodes, list) or not assets_nodes or not isinstance(assets_nodes[0], dict):
            assets_nodes = package["Assets"] = [{}]
        assets = assets_nodes[0].get("Asset")
        if not isinstance(assets, list):
            assets = assets_nodes[0]["Asset"] = []

        assets[:] = [
            asset
            for asset in assets
            if _asset_type(asset).lower() != VSO_MANIFEST_ASSET_TYPE.lower()
            and _asset_path(asset) != VSO_MANIFEST_FILENAME
        ]
        assets.append({"$": {"Type": VSO_MANIFEST_ASSET_TYPE, "Path": VSO_MANIFEST_FILENAME}})

    def asset_paths(self) -> List[str]:
        """Return archive paths of the declared file assets."""

        assets = self.vsix_manifest["PackageManifest"]["Assets"][0]["Asset"]
        paths: List[str] = []
        for asset in assets:
            attributes = asset.get("$") if isinstance(asset, Mapping) else None
            if not attributes or attributes.get("Type") == VSO_MANIFEST_ASSET_TYPE:
                continue
            paths.append(str(attributes["Path"]).replace("\\", "/"))
        return paths

    def build_entries(self) -> Dict[str, bytes]:
        """Collect every archive entry in write order."""

        root = self._root()
        entries: Dict[str, bytes] = {}
        for relative in self.asset_paths():
            source = root / relative
            logger.debug("Adding asset %s", source)
            entries[relative] = source.read_bytes()

        with tempfile.TemporaryDirectory(prefix="vset-") as tmp_dir:
            staging = Path(tmp_dir)
            vso_path = staging / VSO_MANIFEST_FILENAME
            vsix_path = staging / VSIX_MANIFEST_FILENAME
            ManifestWriter(self.vso_manifest, self.vsix_manifest).write_manifests(vso_path, vsix_path)
            entries[VSO_MANIFEST_FILENAME] = vso_path.read_bytes()
            entries[VSIX_MANIFEST_FILENAME] = vsix_path.read_bytes()

        entries[CONTENT_TYPES_FILENAME] = content_types_xml(entries).encode("utf-8")
        return entries

    def write_vsix(self, out_path: Path) -> Path:
        """Write the VSIX package to ``out_path`` and return the path."""

        entries = self.build_entries()
        out_path = Path(out_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        partial_path = out_path.with_name(f"{out_path.name}.partial")
        try:
            with zipfile.ZipFile(partial_path, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as archive:
                for name, data in entries.items():
                    archive.writestr(name, data)
            os.replace(partial_path, out_path)
        finally:
            partial_path.unlink(missing_ok=True)
        logger.info("VSIX written to %s (%d entries)", out_path, len(entries))
        return out_path

    def _root(self) -> Path:
        root: Optional[str] = self.vso_manifest.get(META_ROOT)
        if not root:
            raise MissingContextError(
                "Manifest root unknown. Manifest objects should have a "
                f"{META_ROOT} key specifying the absolute path to the root of assets."
            )
        return Path(root)


def default_vsix_name(vsix_manifest: Mapping[str, Any]) -> str:
    """Return ``<Publisher>.<Id>-<Version>.vsix`` from the package identity."""

    metadata = (vsix_manifest.get("PackageManifest") or {}).get("Metadata") or [{}]
    identity = ((metadata[0].get("Identity") or [{}])[0]).get("$") or {}
    stem = ".".join(str(part) for part in (identity.get("Publisher"), identity.get("Id")) if part)
    version = identity.get("Version")
    if version:
        stem = f"{stem}-{version}" if stem else str(version)
    return f"{stem or 'extension'}.vsix"


def resolve_output_path(output_path: str, vsix_manifest: Mapping[str, Any]) -> Path:
    """Expand the ``{auto}`` placeholder and make the path absolute."""

    if output_path == "{auto}":
        return Path.cwd() / default_vsix_name(vsix_manifest)
    return Path(os.path.abspath(output_path))


def _asset_type(asset: Any) -> str:
    if isinstance(asset, Mapping):
        attributes = asset.get("$")
        if isinstance(attributes, Mapping):
            return str(attributes.get("Type", "x"))
    return "x"


def _asset_path(asset: Any) -> str:
    if isinstance(asset, Mapping):
        attributes = asset.get("$")
        if isinstance(attributes, Mapping):
            return str(attributes.get("Path", "")).replace("\\", "/")
    return ""
