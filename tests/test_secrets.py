from __future__ import annotations

from pathlib import Path

import pytest

import vset.secrets as secrets


def test_resolve_secret_info_reports_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TEST_SECRET", "value")

    info = secrets.resolve_secret_info("TEST_SECRET")

    assert info.value == "value"
    assert info.source == "env"
    assert [attempt.success for attempt in info.attempts] == [True]


def test_resolve_secret_from_dotenv(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DOT_SECRET", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text('export DOT_SECRET="abc123"  # inline comment\nMALFORMED_LINE\n', encoding="utf-8")
    secrets.use_dotenv(env_file)

    info = secrets.resolve_secret_info("DOT_SECRET")

    assert info.value == "abc123"
    assert info.source == "dotenv"
    assert info.attempts[0].resolver == "env"
    assert not info.attempts[0].success
    dotenv_attempt = info.attempts[1]
    assert dotenv_attempt.details["path"] == str(env_file)
    assert dotenv_attempt.details["warnings"] == ["line 2: missing '='"]


def test_unresolved_secret_lists_attempts(tmp_path: Path) -> None:
    secrets.use_dotenv(tmp_path / "missing.env")

    info = secrets.resolve_secret_info("UNKNOWN_SECRET_FOR_TEST")

    assert info.value is None
    assert secrets.resolve_secret("UNKNOWN_SECRET_FOR_TEST") is None
    assert [attempt.source for attempt in info.attempts] == ["env", "dotenv"]
    assert info.attempts[1].details["exists"] is False


def test_use_dotenv_registers_each_path_once(tmp_path: Path) -> None:
    secrets.use_dotenv(tmp_path / ".env")
    secrets.use_dotenv(tmp_path / ".env")
    secrets.use_dotenv(tmp_path / "other.env")

    names = [entry.name for entry in secrets._resolvers]
    assert names.count(f"dotenv:{tmp_path / '.env'}") == 1
    assert f"dotenv:{tmp_path / 'other.env'}" in names
