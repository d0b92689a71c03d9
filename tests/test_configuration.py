"""Tests for the site-aware configuration loader."""

from __future__ import annotations

from pathlib import Path

import pytest

from extconf import configuration


def _prepare_defaults(tmp_path: Path, content: str = "runtime:\n  name: extconf\n") -> Path:
    config_dir = tmp_path / "defaults"
    config_dir.mkdir()
    (config_dir / "10-defaults.yml").write_text(content, encoding="utf-8")
    return config_dir


def _write_override(site: Path, content: str, filename: str = "local.yml") -> None:
    cfg_dir = site / "config"
    cfg_dir.mkdir(parents=True, exist_ok=True)
    (cfg_dir / filename).write_text(content, encoding="utf-8")


def test_resolve_site_dir_uses_env_expansion(tmp_path: Path):
    env = {"EXTCONF_SITE_DIR": str(tmp_path / "site")}

    assert configuration.resolve_site_dir(env=env) == tmp_path / "site"


def test_packaged_defaults_are_valid(tmp_path: Path):
    bundle = configuration.load_runtime_configuration(tmp_path)

    assert bundle.status == "ready"
    assert bundle.merged["storage"]["active_dir"] == "active"
    assert bundle.merged["extensions"]["search_dirs"] == ["modules", "themes", "profiles"]
    assert bundle.merged["entities"] == []


def test_site_overrides_merge_over_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(configuration, "DEFAULT_CONFIG_DIR", _prepare_defaults(tmp_path))
    site = tmp_path / "site"
    _write_override(site, "logging:\n  level: DEBUG\nextensions:\n  profile: standard\n")

    bundle = configuration.load_runtime_configuration(site)

    assert bundle.status == "ready"
    assert bundle.merged["runtime"]["name"] == "extconf"
    assert bundle.merged["logging"]["level"] == "DEBUG"
    assert bundle.merged["logging"]["structured"] is False
    assert bundle.section("extensions")["profile"] == "standard"
    assert len(bundle.files_loaded) == 2


def test_missing_site_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(configuration, "DEFAULT_CONFIG_DIR", _prepare_defaults(tmp_path))

    bundle = configuration.load_runtime_configuration(tmp_path / "missing")

    assert bundle.status == "missing"
    assert any(diag.level == "error" for diag in bundle.diagnostics)


def test_bad_yaml_marks_configuration_invalid(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(configuration, "DEFAULT_CONFIG_DIR", _prepare_defaults(tmp_path))
    site = tmp_path / "site"
    _write_override(site, "storage: [\n", filename="broken.yml")

    bundle = configuration.load_runtime_configuration(site)

    assert bundle.status == "invalid"
    assert any("Failed to parse" in diag.message for diag in bundle.diagnostics)


def test_invalid_types_fall_back_to_defaults(tmp_path: Path):
    site = tmp_path / "site"
    _write_override(site, "logging:\n  structured: 'yes'\nentities:\n  - node_type\n")

    bundle = configuration.load_runtime_configuration(site)

    assert bundle.status == "invalid"
    assert bundle.merged["logging"]["structured"] is False
    assert bundle.merged["entities"] == []
    assert any("structured" in diag.message for diag in bundle.diagnostics)


def test_unknown_keys_warn(tmp_path: Path):
    site = tmp_path / "site"
    _write_override(site, "mystery:\n  value: 1\n")

    bundle = configuration.load_runtime_configuration(site)

    assert bundle.status == "ready"
    assert any("Unknown configuration key" in diag.message for diag in bundle.diagnostics)
