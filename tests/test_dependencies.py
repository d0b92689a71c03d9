"""Tests for dependency resolution."""

from __future__ import annotations

from extconf.dependencies import enabled_extensions, extension_names, missing_dependencies
from extconf.storage import MemoryActiveStore


def test_no_dependencies_key_reports_nothing():
    assert missing_dependencies("foo.settings", {"k": 1}, ["foo"], ["foo.settings"]) == []


def test_enforced_dependencies_are_merged():
    data = {"dependencies": {"module": ["A", "B"], "enforced": {"module": ["C"]}}}

    missing = missing_dependencies("prov.thing", data, ["A", "C", "prov"], [])

    assert missing == ["B"]


def test_provider_is_added_as_module_dependency():
    data = {"dependencies": {"config": ["other.record"]}}

    missing = missing_dependencies("views.view.frontpage", data, ["node"], ["other.record"])

    assert missing == ["views"]


def test_config_dependencies_checked_against_active_names():
    data = {"dependencies": {"config": ["a.one", "a.two"], "module": ["mod"]}}

    missing = missing_dependencies("mod.x", data, ["mod"], ["a.one"])

    assert missing == ["a.two"]


def test_theme_dependencies_checked_against_enabled_extensions():
    data = {"dependencies": {"theme": ["olivero", "claro"]}}

    missing = missing_dependencies("block.block.x", data, ["block", "claro"], [])

    assert missing == ["olivero"]


def test_empty_comparison_list_skips_category():
    data = {"dependencies": {"config": ["a.one"]}}

    missing = missing_dependencies("mod.x", data, ["mod"], [])

    assert missing == []


def test_unknown_categories_are_ignored():
    data = {"dependencies": {"content": ["node:page:uuid"], "module": ["mod"]}}

    assert missing_dependencies("mod.x", data, ["mod"], ["x"]) == []


def test_duplicates_are_not_collapsed():
    data = {
        "dependencies": {
            "module": ["gone"],
            "enforced": {"module": ["gone"]},
        }
    }

    missing = missing_dependencies("mod.x", data, ["mod"], [])

    assert missing == ["gone", "gone"]


def test_resolver_does_not_mutate_record():
    data = {"dependencies": {"module": ["A"], "enforced": {"module": ["B"]}}}

    missing_dependencies("prov.x", data, ["prov"], [])

    assert data == {"dependencies": {"module": ["A"], "enforced": {"module": ["B"]}}}


def test_enabled_extensions_reads_core_extension_record():
    store = MemoryActiveStore(
        {"core.extension": {"module": {"node": 0, "views": 10}, "theme": {"olivero": 0}}}
    )

    assert enabled_extensions(store) == ["node", "views", "olivero", "core"]


def test_enabled_extensions_without_record_is_core_only():
    assert enabled_extensions(MemoryActiveStore()) == ["core"]


def test_extension_names_accepts_mapping_list_or_bare_name():
    record = {"module": {"node": 0, "views": 10}, "theme": ["olivero"], "profile": "standard"}

    assert extension_names(record, "module") == ["node", "views"]
    assert extension_names(record, "theme") == ["olivero"]
    assert extension_names({"module": "foo"}, "module") == ["foo"]
    assert extension_names({}, "module") == []


def test_enabled_extensions_follows_record_changes():
    store = MemoryActiveStore({"core.extension": {"module": {"node": 0}}})
    assert enabled_extensions(store) == ["node", "core"]

    store.write("core.extension", {"module": {"node": 0, "views": 0}})

    assert enabled_extensions(store) == ["node", "views", "core"]
