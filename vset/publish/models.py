"""Data models used during gallery publishing."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List


@dataclass(slots=True)
class PublishResult:
    vsix_path: Path
    gallery_url: str
    sha256: str
    extension: Dict[str, Any] = field(default_factory=dict)
    logs: List[str] = field(default_factory=list)
    published_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, object]:
        return {
            "vsix_path": str(self.vsix_path),
            "gallery_url": self.gallery_url,
            "sha256": self.sha256,
            "extension": self.extension,
            "logs": self.logs,
            "published_at": self.published_at.isoformat(),
        }
