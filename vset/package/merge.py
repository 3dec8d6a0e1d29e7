"""Merge partial manifests into a service manifest and a package manifest."""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from ..settings import PackageSettings
from .loader import gather_manifests, load_partial_manifests
from .models import META_ROOT, PartialManifest, SplitManifest
from .paths import resolve_asset_paths
from .template import load_default_vsix_manifest

logger = logging.getLogger(__name__)

MergeRule = Callable[[Any, Dict[str, Any], Dict[str, Any]], None]


def deep_merge(
    target: Dict[str, Any],
    source: Mapping[str, Any],
    *,
    concat_lists: bool = False,
) -> Dict[str, Any]:
    """Recursively merge ``source`` into ``target`` in place.

    Nested objects are merged key by key. Any other value replaces the target
    value, except that with ``concat_lists`` an existing list in ``target`` is
    extended with the incoming value instead.
    """

    for key, incoming in source.items():
        existing = target.get(key)
        if concat_lists and isinstance(existing, list):
            extra = incoming if isinstance(incoming, list) else [incoming]
            target[key] = existing + copy.deepcopy(extra)
        elif isinstance(existing, dict) and isinstance(incoming, Mapping):
            deep_merge(existing, incoming, concat_lists=concat_lists)
        else:
            target[key] = copy.deepcopy(incoming)
    return target


def _metadata(vsix: Dict[str, Any]) -> Dict[str, Any]:
    return vsix["PackageManifest"]["Metadata"][0]


def _identity(vsix: Dict[str, Any]) -> Dict[str, Any]:
    metadata = _metadata(vsix)
    identity = metadata.setdefault("Identity", [{}])
    return identity[0].setdefault("$", {})


def _join(value: Any) -> Any:
    if isinstance(value, list):
        return ",".join(str(item) for item in value)
    return value


def _merge_namespace(value: Any, vso: Dict[str, Any], vsix: Dict[str, Any]) -> None:
    vso["namespace"] = value
    _identity(vsix)["Id"] = value


def _merge_version(value: Any, vso: Dict[str, Any], vsix: Dict[str, Any]) -> None:
    vso["version"] = value
    _identity(vsix)["Version"] = value


def _merge_name(value: Any, vso: Dict[str, Any], vsix: Dict[str, Any]) -> None:
    vso["name"] = value
    _metadata(vsix)["DisplayName"] = [value]


def _merge_description(value: Any, vso: Dict[str, Any], vsix: Dict[str, Any]) -> None:
    vso["description"] = value
    metadata = _metadata(vsix)
    description = metadata.get("Description")
    if isinstance(description, list) and description and isinstance(description[0], dict):
        description[0]["_"] = value
    else:
        metadata["Description"] = [{"$": {"xml:space": "preserve"}, "_": value}]


def _merge_publisher(value: Any, vso: Dict[str, Any], vsix: Dict[str, Any]) -> None:
    _identity(vsix)["Publisher"] = value


def _merge_release_notes(value: Any, vso: Dict[str, Any], vsix: Dict[str, Any]) -> None:
    _metadata(vsix)["ReleaseNotes"] = [value]


def _metadata_list_rule(element: str) -> MergeRule:
    def rule(value: Any, vso: Dict[str, Any], vsix: Dict[str, Any]) -> None:
        _metadata(vsix)[element] = [_join(value)]

    rule.__name__ = f"_merge_{element.lower()}"
    return rule


def _merge_base_uri(value: Any, vso: Dict[str, Any], vsix: Dict[str, Any]) -> None:
    vso["baseUri"] = value


def _service_object_rule(field: str, *, concat_lists: bool) -> MergeRule:
    def rule(value: Any, vso: Dict[str, Any], vsix: Dict[str, Any]) -> None:
        target = vso.get(field)
        if not isinstance(target, dict):
            target = vso[field] = {}
        if isinstance(value, Mapping):
            deep_merge(target, value, concat_lists=concat_lists)

    rule.__name__ = f"_merge_{field.lower()}"
    return rule


def _merge_assets(value: Any, vso: Dict[str, Any], vsix: Dict[str, Any]) -> None:
    # Replaces assets from earlier partials; only the last declaration survives.
    # One entry per Path: a repeated path keeps its first position and its last Type.
    if not isinstance(value, list):
        return
    by_path: Dict[str, Dict[str, Any]] = {}
    for asset in value:
        path = str(asset["path"]).replace("\\", "/")
        by_path[path] = {"$": {"Type": asset["type"], "d:Source": "File", "Path": path}}
    vsix["PackageManifest"]["Assets"] = [{"Asset": list(by_path.values())}]


MERGE_RULES: Dict[str, MergeRule] = {
    "namespace": _merge_namespace,
    "version": _merge_version,
    "name": _merge_name,
    "description": _merge_description,
    "publisher": _merge_publisher,
    "releasenotes": _merge_release_notes,
    "tags": _metadata_list_rule("Tags"),
    "vsoflags": _metadata_list_rule("VSOFlags"),
    "categories": _metadata_list_rule("Categories"),
    "baseuri": _merge_base_uri,
    "contributions": _service_object_rule("contributions", concat_lists=True),
    "contributionpoints": _service_object_rule("contributionPoints", concat_lists=False),
    "contributiontypes": _service_object_rule("contributionTypes", concat_lists=False),
    "assets": _merge_assets,
}


def merge_key(key: str, value: Any, vso: Dict[str, Any], vsix: Dict[str, Any]) -> bool:
    """Apply the rule registered for ``key``; return False for unknown keys."""

    rule = MERGE_RULES.get(key.lower())
    if rule is None:
        logger.debug("Ignoring unrecognized manifest key %r", key)
        return False
    rule(value, vso, vsix)
    return True


def merge_partials(
    partials: Iterable[PartialManifest],
    root: Path,
    *,
    vsix_template: Optional[Dict[str, Any]] = None,
) -> SplitManifest:
    """Fold ``partials`` in order into a fresh pair of manifests."""

    root = Path(root).resolve()
    vsix = copy.deepcopy(vsix_template) if vsix_template is not None else load_default_vsix_manifest()
    vso: Dict[str, Any] = {META_ROOT: str(root)}
    vsix[META_ROOT] = str(root)

    for partial in partials:
        resolve_asset_paths(partial, root)
        for key, value in partial.fields.items():
            merge_key(key, value, vso, vsix)
    return SplitManifest(vso_manifest=vso, vsix_manifest=vsix)


class Merger:
    """Locates partial manifests under a package root and merges them."""

    def __init__(self, settings: PackageSettings) -> None:
        self.settings = settings
        self.root = Path(settings.root).resolve()

    def gather(self) -> List[Path]:
        return gather_manifests(self.root, self.settings.manifest_globs)

    def merge(self) -> SplitManifest:
        """Find all partial manifests and merge them into one SplitManifest."""

        files = self.gather()
        logger.info("Merging %d partial manifest(s) from %s", len(files), self.root)
        partials = load_partial_manifests(files)
        if self.settings.overrides:
            partials.append(
                PartialManifest(
                    origin=self.root / "overrides.json",
                    fields=copy.deepcopy(dict(self.settings.overrides)),
                )
            )
        return merge_partials(partials, self.root)
