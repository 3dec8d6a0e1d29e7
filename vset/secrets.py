"""Resolution of the gallery access token and other secrets."""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Protocol


@dataclass(frozen=True)
class SecretSpec:
    name: str
    description: str = ""


class SecretResolver(Protocol):
    def resolve(self, spec: SecretSpec) -> Optional[str]:  # pragma: no cover - interface
        ...

    def describe(self) -> dict[str, object]:  # pragma: no cover - optional hook
        return {}


@dataclass(frozen=True)
class SecretAttempt:
    resolver: str
    source: str
    success: bool
    details: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class SecretResolutionInfo:
    name: str
    value: Optional[str]
    source: Optional[str]
    attempts: List[SecretAttempt]


@dataclass
class _RegisteredResolver:
    priority: int
    resolver: SecretResolver
    name: str
    source: str


_secret_specs: dict[str, SecretSpec] = {}
_resolvers: List[_RegisteredResolver] = []


def register_secret(spec: SecretSpec) -> None:
    _secret_specs.setdefault(spec.name, spec)


def register_resolver(
    resolver: SecretResolver,
    priority: int = 0,
    *,
    name: Optional[str] = None,
    source: Optional[str] = None,
) -> None:
    label = name or resolver.__class__.__name__
    _resolvers.append(_RegisteredResolver(priority=priority, resolver=resolver, name=label, source=source or label))
    _resolvers.sort(key=lambda item: item.priority, reverse=True)


class EnvResolver:
    """Resolve secrets from process environment variables."""

    def resolve(self, spec: SecretSpec) -> Optional[str]:
        value = os.getenv(spec.name)
        return value if value else None

    def describe(self) -> dict[str, object]:
        return {"type": "env"}


class DotEnvResolver:
    """Resolve secrets from a ``KEY=value`` file, loaded on first use."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._loaded = False
        self._warnings: List[str] = []
        self._values: Dict[str, str] = {}

    def resolve(self, spec: SecretSpec) -> Optional[str]:
        self._ensure_loaded()
        value = self._values.get(spec.name)
        return value if value else None

    def describe(self) -> dict[str, object]:
        return {
            "type": "dotenv",
            "path": str(self.path),
            "exists": self.path.exists(),
            "warnings": list(self._warnings),
        }

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        self._loaded = True
        if not self.path.exists():
            return

        for idx, line in enumerate(self.path.read_text(encoding="utf-8").splitlines(), start=1):
            raw = line.strip()
            if not raw or raw.startswith("#"):
                continue
            if raw.lower().startswith("export "):
                raw = raw[6:].strip()
            if "=" not in raw:
                self._warnings.append(f"line {idx}: missing '='")
                continue
            key, value_part = raw.split("=", 1)
            key = key.strip()
            if not key:
                self._warnings.append(f"line {idx}: empty key")
                continue
            try:
                tokens = shlex.split(value_part, posix=True, comments=True)
            except ValueError as exc:
                self._warnings.append(f"line {idx}: {exc}")
                continue
            self._values[key] = " ".join(tokens)


register_resolver(EnvResolver(), priority=0, name="env", source="env")


def use_dotenv(path: str | Path, *, priority: int = -10) -> None:
    """Register a ``.env`` file as a secret source; a path is registered once."""

    resolver = DotEnvResolver(Path(path))
    name = f"dotenv:{resolver.path}"
    if any(entry.name == name for entry in _resolvers):
        return
    register_resolver(resolver, priority=priority, name=name, source="dotenv")


def resolve_secret(name: str) -> Optional[str]:
    return resolve_secret_info(name).value


def resolve_secret_info(name: str) -> SecretResolutionInfo:
    spec = _secret_specs.get(name, SecretSpec(name=name))
    attempts: List[SecretAttempt] = []

    for entry in _resolvers:
        value = entry.resolver.resolve(spec)
        describe = getattr(entry.resolver, "describe", None)
        details = describe() if callable(describe) else {}
        attempts.append(
            SecretAttempt(resolver=entry.name, source=entry.source, success=bool(value), details=dict(details))
        )
        if value:
            return SecretResolutionInfo(name=spec.name, value=value, source=entry.source, attempts=attempts)

    return SecretResolutionInfo(name=spec.name, value=None, source=None, attempts=attempts)
