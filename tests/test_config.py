"""Tests para la configuración."""

from __future__ import annotations

import json
import pathlib

import pytest
from pydantic import ValidationError

from docguard.config import Settings, get_settings, load_settings, save_settings


def test_defaults():
    settings = Settings()

    assert settings.docs_root == "Documentation"
    assert settings.max_future_days == 1
    assert settings.max_past_days == 7
    assert settings.rule_cache_ttl_seconds == 600
    assert "2025-08-07" in settings.blacklisted_dates
    assert "TESTING" in settings.critical_sections
    assert settings.tooling_module in settings.module_names


def test_env_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: pathlib.Path):
    monkeypatch.setenv("DOCGUARD_PROJECT_ROOT", str(tmp_path))
    monkeypatch.setenv("DOCGUARD_MAX_PAST_DAYS", "30")
    monkeypatch.setenv("DOCGUARD_SOURCE_EXTENSIONS", '[".cs"]')

    settings = get_settings()

    assert settings.project_root == tmp_path
    assert settings.max_past_days == 30
    assert settings.source_extensions == [".cs"]


@pytest.mark.parametrize(
    "field, value",
    [("max_past_days", -1), ("max_future_days", -5), ("rule_cache_ttl_seconds", 0)],
)
def test_invalid_values(field: str, value):
    with pytest.raises(ValidationError):
        Settings(**{field: value})


def test_save_and_load(tmp_path: pathlib.Path):
    path = tmp_path / "config" / "docguard.json"
    settings = Settings(project_root=tmp_path, max_past_days=14, blacklisted_dates=["2023-01-01"])

    assert save_settings(settings, path)
    assert not save_settings(settings, path)

    loaded = load_settings(path)
    assert loaded.max_past_days == 14
    assert loaded.blacklisted_dates == ["2023-01-01"]
    assert loaded.project_root == tmp_path


def test_load_rejects_non_object(tmp_path: pathlib.Path):
    path = tmp_path / "docguard.json"
    path.write_text(json.dumps(["no", "es", "un", "objeto"]), encoding="utf-8")

    with pytest.raises(ValueError):
        load_settings(path)
