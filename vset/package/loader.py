"""Discovery and loading of partial manifests."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, List

from ..errors import MalformedManifestError
from .models import PartialManifest

logger = logging.getLogger(__name__)


def gather_manifests(root: Path, patterns: Iterable[str]) -> List[Path]:
    """Expand glob patterns under ``root`` into a sorted, unique file list."""

    found: dict[str, Path] = {}
    for pattern in patterns:
        matches = [path for path in root.glob(pattern) if path.is_file()]
        logger.debug("Pattern %s matched %d file(s)", pattern, len(matches))
        for path in matches:
            resolved = path.resolve()
            found.setdefault(resolved.as_posix(), resolved)
    return [found[key] for key in sorted(found)]


def load_partial_manifests(paths: Iterable[Path]) -> List[PartialManifest]:
    """Read and parse every partial manifest; fail on the first bad file."""

    partials: List[PartialManifest] = []
    for path in paths:
        partials.append(load_partial_manifest(Path(path)))
    return partials


def load_partial_manifest(path: Path) -> PartialManifest:
    raw = path.read_bytes()
    content = raw.decode("utf-8", errors="replace")
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.error("Error parsing the JSON in %s:", path)
        logger.error("%s", content)
        raise MalformedManifestError(path, content, str(exc)) from exc
    if not isinstance(payload, dict):
        raise MalformedManifestError(path, content, "top-level value must be a JSON object")
    logger.debug("Loaded partial manifest %s (%d keys)", path, len(payload))
    return PartialManifest(origin=path.resolve(), fields=payload)
