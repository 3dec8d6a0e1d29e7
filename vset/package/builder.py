"""End-to-end package creation."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..settings import PackageSettings
from .archive import VsixWriter, resolve_output_path
from .merge import Merger
from .models import SplitManifest
from .utils import compute_sha256

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PackageResult:
    vsix_path: Path
    sha256: str
    manifests: SplitManifest


def build_package(settings: PackageSettings, *, output_path: Optional[Path] = None) -> PackageResult:
    """Merge partial manifests under ``settings.root`` and write the VSIX."""

    logger.info("Begin package creation")
    manifests = Merger(settings).merge()
    logger.info("Merged successfully")

    target = Path(output_path) if output_path else resolve_output_path(settings.output_path, manifests.vsix_manifest)
    writer = VsixWriter(manifests.vso_manifest, manifests.vsix_manifest)
    vsix_path = writer.write_vsix(target)
    logger.info("Successfully created VSIX package")
    return PackageResult(vsix_path=vsix_path, sha256=compute_sha256(vsix_path), manifests=manifests)
