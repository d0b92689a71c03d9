"""Assemble a sync manager from a loaded configuration bundle."""

from __future__ import annotations

from pathlib import Path

from .codec import YamlCodec
from .configuration import ConfigurationBundle
from .extensions import ExtensionRegistry
from .manager import ConfigSyncManager
from .storage import DirectoryActiveStore, EntityRegistry


def active_store_path(bundle: ConfigurationBundle) -> Path:
    raw = Path(bundle.section("storage").get("active_dir") or "active").expanduser()
    return raw if raw.is_absolute() else bundle.site_dir / raw


def build_manager(bundle: ConfigurationBundle) -> ConfigSyncManager:
    codec = YamlCodec()
    store = DirectoryActiveStore(active_store_path(bundle), codec=codec)
    ext_settings = bundle.section("extensions")
    extensions = ExtensionRegistry.from_site(
        bundle.site_dir,
        ext_settings.get("search_dirs") or [],
        store,
        profile=ext_settings.get("profile"),
    )
    entities = EntityRegistry.from_config(bundle.merged.get("entities"))
    return ConfigSyncManager(store, extensions, entities, codec=codec)


__all__ = ["active_store_path", "build_manager"]
