"""Packaging and gallery publishing for extension manifests."""

__version__ = "0.1.0"
from .errors import (
    GalleryError,
    MalformedManifestError,
    ManifestSchemaError,
    MissingContextError,
    SettingsError,
    VsetError,
)
from .package import Merger, PackageResult, SplitManifest, VsixWriter, build_package, merge_partials
from .publish import GalleryClient, PublishResult, publish_vsix, translate_error
from .settings import PackageSettings, PublishSettings, Settings, resolve_settings

__all__ = [
    "__version__",
    "GalleryClient",
    "GalleryError",
    "MalformedManifestError",
    "ManifestSchemaError",
    "Merger",
    "MissingContextError",
    "PackageResult",
    "PackageSettings",
    "PublishResult",
    "PublishSettings",
    "Settings",
    "SettingsError",
    "SplitManifest",
    "VsetError",
    "VsixWriter",
    "build_package",
    "merge_partials",
    "publish_vsix",
    "resolve_settings",
    "translate_error",
]
