"""Rewrite asset paths relative to the package root."""

from __future__ import annotations

import ntpath
import os
import posixpath
from pathlib import Path

from pydantic import ValidationError

from ..errors import ManifestSchemaError
from ..schemas.manifest import AssetDeclaration
from .models import PartialManifest


def is_absolute_path(value: str) -> bool:
    return posixpath.isabs(value) or ntpath.isabs(value)


def resolve_asset_paths(partial: PartialManifest, root: Path) -> None:
    """Validate ``partial``'s assets and rebase their paths onto ``root``.

    Asset paths are declared relative to the directory of the manifest that
    declares them. After this call each path is relative to ``root`` and uses
    forward slashes, so the merge no longer needs the manifest's origin.
    Every ``assets`` array is handled, whatever the casing of its key.
    """

    asset_lists = partial.asset_lists()
    if not asset_lists:
        return
    origin_dir = partial.origin.parent.resolve()
    root_dir = Path(root).resolve()
    for assets in asset_lists:
        for asset in assets:
            try:
                declaration = AssetDeclaration.model_validate(asset)
            except ValidationError as exc:
                raise ManifestSchemaError("Assets must have a type and a path.") from exc
            if is_absolute_path(declaration.path):
                raise ManifestSchemaError("Paths in manifests must be relative.")
            local = declaration.path.replace("\\", "/")
            absolute = os.path.normpath(os.path.join(origin_dir, local))
            relative = os.path.relpath(absolute, root_dir)
            asset["path"] = relative.replace(os.sep, "/")
