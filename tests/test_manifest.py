"""Tests for info file parsing."""

from __future__ import annotations

from pathlib import Path

import pytest

from extconf.errors import ManifestError
from extconf.manifest import ConfigCategory, read_manifest


def _write_info(directory: Path, name: str, content: str) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / f"{name}.info.yml").write_text(content, encoding="utf-8")


def test_categories_iterate_install_first():
    assert list(ConfigCategory) == [ConfigCategory.INSTALL, ConfigCategory.OPTIONAL]
    assert ConfigCategory.INSTALL.directory == "config/install"
    assert ConfigCategory.OPTIONAL.directory == "config/optional"


def test_read_manifest_keeps_declared_order(tmp_path: Path):
    _write_info(
        tmp_path,
        "foo",
        "name: Foo\ntype: module\nconfig:\n  install:\n    - foo.b\n    - foo.a\n  optional:\n    - foo.c\n",
    )

    manifest = read_manifest(tmp_path, "foo")

    assert manifest.names(ConfigCategory.INSTALL) == ["foo.b", "foo.a"]
    assert manifest.names(ConfigCategory.OPTIONAL) == ["foo.c"]
    assert manifest.directory(ConfigCategory.INSTALL) == tmp_path / "config" / "install"


def test_missing_categories_are_empty(tmp_path: Path):
    _write_info(tmp_path, "bar", "name: Bar\ntype: theme\n")

    manifest = read_manifest(tmp_path, "bar")

    assert manifest.install == []
    assert manifest.optional == []
    assert manifest.type == "theme"


def test_non_list_category_is_treated_as_empty(tmp_path: Path):
    _write_info(tmp_path, "baz", "type: module\nconfig:\n  install: baz.settings\n")

    manifest = read_manifest(tmp_path, "baz")

    assert manifest.install == []


def test_missing_info_file_raises(tmp_path: Path):
    with pytest.raises(ManifestError):
        read_manifest(tmp_path, "nope")


def test_broken_info_file_raises(tmp_path: Path):
    _write_info(tmp_path, "bad", "config: [\n")

    with pytest.raises(ManifestError):
        read_manifest(tmp_path, "bad")
