"""Data containers passed between the packaging stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

META_PREFIX = "__meta_"
META_ROOT = f"{META_PREFIX}root"
ASSETS_KEY = "assets"


@dataclass(slots=True)
class PartialManifest:
    """One parsed partial manifest and the file it came from."""

    origin: Path
    fields: Dict[str, Any] = field(default_factory=dict)

    def asset_lists(self) -> List[List[Any]]:
        """Return every ``assets`` array, whatever the casing of its key."""

        return [
            value for key, value in self.fields.items() if key.lower() == ASSETS_KEY and isinstance(value, list)
        ]


@dataclass(slots=True)
class SplitManifest:
    """The merged service manifest (JSON) and package manifest (XML shape)."""

    vso_manifest: Dict[str, Any]
    vsix_manifest: Dict[str, Any]

    @property
    def root(self) -> Optional[Path]:
        value = self.vso_manifest.get(META_ROOT)
        return Path(value) if value else None
