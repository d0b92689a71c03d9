"""End-to-end tests for the sync commands against a site on disk."""

from __future__ import annotations

from pathlib import Path

import yaml

from extconf.app import build_router, main
from extconf.configuration import load_runtime_configuration


def _build_site(tmp_path: Path) -> Path:
    site = tmp_path / "site"
    module_dir = site / "modules" / "custom" / "foo"
    (module_dir / "config" / "install").mkdir(parents=True)
    (module_dir / "foo.info.yml").write_text(
        "name: Foo\ntype: module\nconfig:\n  install:\n    - foo.settings\n    - node.type.page\n",
        encoding="utf-8",
    )
    (module_dir / "config" / "install" / "node.type.page.yml").write_text(
        "label: Page\n", encoding="utf-8"
    )
    (module_dir / "config" / "install" / "foo.stale.yml").write_text("k: 1\n", encoding="utf-8")

    active = site / "active"
    active.mkdir(parents=True)
    (active / "core.extension.yml").write_text(
        "module:\n  foo: 0\n  node: 0\ntheme: {}\n", encoding="utf-8"
    )
    (active / "foo.settings.yml").write_text(
        "_core:\n  default_config_hash: abc\nuuid: 1234\nlimit: 3\n", encoding="utf-8"
    )

    (site / "config").mkdir()
    (site / "config" / "site.yml").write_text(
        "entities:\n  - entity_type: node_type\n    config_prefix: node.type\n    id_key: type\n",
        encoding="utf-8",
    )
    return site


def _router(site: Path):
    return build_router(load_runtime_configuration(site))


def test_export_command_writes_files(tmp_path: Path):
    site = _build_site(tmp_path)

    output = _router(site).handle("export", ["foo"])

    exported = site / "modules" / "custom" / "foo" / "config" / "install" / "foo.settings.yml"
    assert yaml.safe_load(exported.read_text(encoding="utf-8")) == {"limit": 3}
    assert "foo.settings" in output
    assert "missing-in-active" in output


def test_import_command_creates_entity(tmp_path: Path):
    site = _build_site(tmp_path)

    _router(site).handle("import", ["foo"])

    data = yaml.safe_load((site / "active" / "node.type.page.yml").read_text(encoding="utf-8"))
    assert data["type"] == "page"
    assert data["label"] == "Page"
    assert data["uuid"]


def test_status_command_lists_rows(tmp_path: Path):
    site = _build_site(tmp_path)

    output = _router(site).handle("status", ["foo"])

    assert "missing in extension" in output
    assert "missing in active" in output


def test_untracked_command_lists_unknown_files(tmp_path: Path):
    site = _build_site(tmp_path)

    output = _router(site).handle("untracked", ["foo"])

    assert "foo.stale.yml" in output
    assert "node.type.page.yml" not in output


def test_unknown_extension_is_reported(tmp_path: Path):
    site = _build_site(tmp_path)

    output = _router(site).handle("delete", ["ghost"])

    assert output == "[delete] Extension ghost is not enabled."


def test_missing_argument_shows_usage(tmp_path: Path):
    site = _build_site(tmp_path)

    assert _router(site).handle("export", []) == "[export] usage: export <extension>"


def test_delete_command_removes_active_records(tmp_path: Path):
    site = _build_site(tmp_path)

    output = _router(site).handle("delete", ["foo"])

    assert not (site / "active" / "foo.settings.yml").exists()
    assert "not-found" in output


def test_main_runs_command(tmp_path: Path, capsys):
    site = _build_site(tmp_path)

    exit_code = main(["--site", str(site), "untracked", "foo"])

    assert exit_code == 0
    assert "foo.stale.yml" in capsys.readouterr().out
    assert (site / "logs" / "extconf.log").exists()


def test_main_unknown_command_exit_code(tmp_path: Path, capsys):
    site = _build_site(tmp_path)

    assert main(["--site", str(site), "frobnicate"]) == 2
    assert "Unknown command" in capsys.readouterr().out


def test_main_fatal_error_exit_code(tmp_path: Path, capsys):
    site = _build_site(tmp_path)

    assert main(["--site", str(site), "delete", "ghost"]) == 1
    assert "[delete] Extension ghost is not enabled." in capsys.readouterr().out
