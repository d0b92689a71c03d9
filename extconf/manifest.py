"""Extension info files and the configuration they declare."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ManifestError

logger = logging.getLogger("extconf.manifest")

INFO_SUFFIX = ".info.yml"


class ConfigCategory(str, Enum):
    """Configuration categories an extension can ship.

    ``install`` records are required by the extension; ``optional`` records
    are synced on a best-effort basis. Declaration order is iteration order.
    """

    INSTALL = "install"
    OPTIONAL = "optional"

    @property
    def directory(self) -> str:
        return f"config/{self.value}"


@dataclass
class ExtensionManifest:
    """Configuration names an extension declares in its info file."""

    name: str
    type: str
    path: Path
    install: List[str] = field(default_factory=list)
    optional: List[str] = field(default_factory=list)

    def names(self, category: ConfigCategory) -> List[str]:
        if category is ConfigCategory.INSTALL:
            return list(self.install)
        return list(self.optional)

    def directory(self, category: ConfigCategory) -> Path:
        return self.path / category.directory

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "path": str(self.path),
            "config": {
                ConfigCategory.INSTALL.value: list(self.install),
                ConfigCategory.OPTIONAL.value: list(self.optional),
            },
        }


def info_file_path(extension_dir: Path, name: str) -> Path:
    return extension_dir / f"{name}{INFO_SUFFIX}"


def load_info_file(path: Path) -> Dict[str, Any]:
    """Parse an ``*.info.yml`` file into a mapping."""

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ManifestError(f"Could not read info file {path}: {exc}") from exc
    try:
        info = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ManifestError(f"Failed to parse '{path}': {exc}") from exc
    if info is None:
        return {}
    if not isinstance(info, dict):
        raise ManifestError(f"Info file '{path}' must contain a mapping.")
    return info


def read_manifest(
    extension_dir: Path,
    name: str,
    extension_type: Optional[str] = None,
) -> ExtensionManifest:
    """Read the config declarations of ``name`` located in ``extension_dir``."""

    info_path = info_file_path(extension_dir, name)
    info = load_info_file(info_path)

    config_section = info.get("config")
    if not isinstance(config_section, dict):
        config_section = {}

    declared: Dict[ConfigCategory, List[str]] = {}
    for category in ConfigCategory:
        value = config_section.get(category.value)
        if isinstance(value, list):
            declared[category] = [str(item) for item in value]
        else:
            if value is not None:
                logger.warning(
                    "Ignoring config.%s in %s because it is not a list",
                    category.value,
                    info_path,
                )
            declared[category] = []

    return ExtensionManifest(
        name=name,
        type=extension_type or str(info.get("type", "module")),
        path=extension_dir,
        install=declared[ConfigCategory.INSTALL],
        optional=declared[ConfigCategory.OPTIONAL],
    )


__all__ = [
    "ConfigCategory",
    "ExtensionManifest",
    "INFO_SUFFIX",
    "info_file_path",
    "load_info_file",
    "read_manifest",
]
