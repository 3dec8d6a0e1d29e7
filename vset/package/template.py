"""Access to the default package manifest template."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

TEMPLATE_PATH = Path(__file__).resolve().parent.parent / "templates" / "default_vsixmanifest.json"


def load_default_vsix_manifest(path: Path = TEMPLATE_PATH) -> Dict[str, Any]:
    """Return a fresh copy of the package manifest skeleton."""

    return json.loads(path.read_text(encoding="utf-8"))
