from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Dict

import pytest

from vset import secrets


@pytest.fixture(autouse=True)
def _isolate_secret_resolvers(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(secrets, "_resolvers", [])
    secrets.register_resolver(secrets.EnvResolver(), priority=0, name="env", source="env")
    monkeypatch.delenv("VSET_TOKEN", raising=False)


@pytest.fixture()
def write_manifest() -> Callable[[Path, Dict[str, Any]], Path]:
    def _write(path: Path, payload: Dict[str, Any]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def write_asset() -> Callable[[Path, bytes], Path]:
    def _write(path: Path, data: bytes = b"asset") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    return _write
