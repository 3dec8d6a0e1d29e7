"""Partial manifest merging and VSIX assembly."""

from .archive import VsixWriter, content_types_xml, resolve_output_path
from .builder import PackageResult, build_package
from .loader import gather_manifests, load_partial_manifests
from .merge import Merger, merge_partials
from .models import PartialManifest, SplitManifest
from .paths import resolve_asset_paths
from .writer import ManifestWriter

__all__ = [
    "ManifestWriter",
    "Merger",
    "PackageResult",
    "PartialManifest",
    "SplitManifest",
    "VsixWriter",
    "build_package",
    "content_types_xml",
    "gather_manifests",
    "load_partial_manifests",
    "merge_partials",
    "resolve_asset_paths",
    "resolve_output_path",
]
