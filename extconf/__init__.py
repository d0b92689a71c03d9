"""Synchronize extension configuration files with active storage."""

from __future__ import annotations

from .codec import YamlCodec
from .errors import ExtconfError, UnknownExtension
from .extensions import ExtensionRegistry, ExtensionType
from .manager import ConfigStatus, ConfigSyncManager, StatusReport, SyncReport
from .manifest import ConfigCategory, ExtensionManifest, read_manifest
from .storage import (
    ActiveStore,
    DirectoryActiveStore,
    EntityKind,
    EntityRegistry,
    MemoryActiveStore,
)

__version__ = "0.1.0"

__all__ = [
    "ActiveStore",
    "ConfigCategory",
    "ConfigStatus",
    "ConfigSyncManager",
    "DirectoryActiveStore",
    "EntityKind",
    "EntityRegistry",
    "ExtconfError",
    "ExtensionManifest",
    "ExtensionRegistry",
    "ExtensionType",
    "MemoryActiveStore",
    "StatusReport",
    "SyncReport",
    "UnknownExtension",
    "YamlCodec",
    "__version__",
    "read_manifest",
]
