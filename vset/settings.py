"""Layered settings: built-in defaults, a settings file, then CLI options."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel, to_snake

from .errors import SettingsError
from .secrets import SecretSpec, register_secret, resolve_secret

logger = logging.getLogger(__name__)

DEFAULT_MANIFEST_GLOBS = ["**/*-manifest.json"]
DEFAULT_OUTPUT_PATH = "{auto}"
DEFAULT_GALLERY_URL = "https://app.market.visualstudio.com"
TOKEN_SECRET = "VSET_TOKEN"

register_secret(SecretSpec(name=TOKEN_SECRET, description="Personal access token for the gallery."))


class _SettingsModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class PackageSettings(_SettingsModel):
    root: Path = Field(default_factory=Path.cwd)
    manifest_globs: List[str] = Field(default_factory=lambda: list(DEFAULT_MANIFEST_GLOBS))
    output_path: str = DEFAULT_OUTPUT_PATH
    overrides: Optional[Dict[str, Any]] = None


class PublishSettings(_SettingsModel):
    gallery_url: str = DEFAULT_GALLERY_URL
    token: Optional[str] = None
    vsix_path: Optional[Path] = None


class Settings(_SettingsModel):
    package: Optional[PackageSettings] = Field(default_factory=PackageSettings)
    publish: PublishSettings = Field(default_factory=PublishSettings)


def load_settings_file(path: Path) -> Dict[str, Any]:
    """Read a JSON or YAML settings file into a plain dictionary."""

    if not path.exists():
        raise SettingsError(f"Settings file not found: {path}")
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in {".yaml", ".yml"}:
            payload = yaml.safe_load(text) or {}
        else:
            payload = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise SettingsError(f"Invalid settings file {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise SettingsError(f"Settings file {path} must contain an object")
    return payload


def resolve_settings(
    options: Optional[Mapping[str, Any]] = None,
    *,
    settings_path: Optional[Path] = None,
    cwd: Optional[Path] = None,
) -> Settings:
    """Combine defaults, an optional settings file and command-line options.

    ``options`` uses the snake_case field names of :class:`PackageSettings`
    and :class:`PublishSettings` (``root``, ``manifest_globs``,
    ``output_path``, ``gallery_url``, ``token``, ``vsix_path``); ``None``
    values are treated as not given.
    """

    base = Path(cwd) if cwd else Path.cwd()
    package_data: Dict[str, Any] = {"root": base.resolve()}
    publish_data: Dict[str, Any] = {}

    if settings_path is not None:
        settings_path = _absolute(Path(settings_path), base)
        file_data = load_settings_file(settings_path)
        package_data.update(_section(file_data, "package", settings_path))
        publish_data.update(_section(file_data, "publish", settings_path))
        if "root" in package_data:
            package_data["root"] = _absolute(Path(package_data["root"]), settings_path.parent)
        if publish_data.get("vsix_path"):
            publish_data["vsix_path"] = _absolute(Path(publish_data["vsix_path"]), settings_path.parent)
        logger.debug("Loaded settings from %s", settings_path)

    given = {key: value for key, value in (options or {}).items() if value is not None}
    for key in ("manifest_globs", "output_path"):
        if key in given:
            package_data[key] = given[key]
    if "root" in given:
        package_data["root"] = _absolute(Path(given["root"]), base)
    for key in ("gallery_url", "token"):
        if key in given:
            publish_data[key] = given[key]
    if "vsix_path" in given:
        publish_data["vsix_path"] = _absolute(Path(given["vsix_path"]), base)

    try:
        package = PackageSettings.model_validate(package_data)
        publish = PublishSettings.model_validate(publish_data)
    except ValidationError as exc:
        raise SettingsError(f"Invalid settings: {exc}") from exc

    if publish.token is None:
        publish = publish.model_copy(update={"token": resolve_secret(TOKEN_SECRET)})

    if publish.vsix_path is not None:
        return Settings(package=None, publish=publish)
    return Settings(package=package, publish=publish)


def _section(data: Mapping[str, Any], name: str, path: Path) -> Dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise SettingsError(f"Section '{name}' in {path} must be an object")
    return {to_snake(str(key)): value for key, value in section.items()}


def _absolute(path: Path, base: Path) -> Path:
    if not path.is_absolute():
        path = base / path
    return path.resolve()
