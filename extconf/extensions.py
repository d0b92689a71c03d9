"""Extension discovery and type resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .dependencies import extension_names, read_extension_record
from .errors import ManifestError, UnknownExtension
from .manifest import INFO_SUFFIX, load_info_file
from .storage import ActiveStore

logger = logging.getLogger("extconf.extensions")


class ExtensionType(str, Enum):
    MODULE = "module"
    THEME = "theme"
    PROFILE = "profile"


def resolve_extension_type(
    extension: str,
    module_exists: Callable[[str], bool],
    theme_exists: Callable[[str], bool],
    install_profile: Optional[str],
) -> ExtensionType:
    """Classify ``extension`` as an enabled module, theme or the install profile."""

    if module_exists(extension):
        return ExtensionType.MODULE
    if theme_exists(extension):
        return ExtensionType.THEME
    if install_profile and install_profile == extension:
        return ExtensionType.PROFILE
    raise UnknownExtension(extension)


@dataclass
class DiscoveredExtension:
    name: str
    type: ExtensionType
    path: Path


def discover_extensions(roots: Iterable[Path]) -> Dict[str, DiscoveredExtension]:
    """Scan ``roots`` for ``*.info.yml`` files declaring a known ``type``.

    The first location found for a name wins; roots are scanned in order.
    """
    found: Dict[str, DiscoveredExtension] = {}
    for root in roots:
        if not root.is_dir():
            logger.debug("Extension search directory %s does not exist", root)
            continue
        for info_path in sorted(root.rglob(f"*{INFO_SUFFIX}")):
            name = info_path.name[: -len(INFO_SUFFIX)]
            if name in found:
                continue
            try:
                info = load_info_file(info_path)
            except ManifestError as exc:
                logger.warning("Skipping %s: %s", info_path, exc)
                continue
            try:
                ext_type = ExtensionType(str(info.get("type", "")))
            except ValueError:
                logger.debug("Ignoring %s without a recognised type", info_path)
                continue
            found[name] = DiscoveredExtension(name=name, type=ext_type, path=info_path.parent)
    return found


@dataclass
class ExtensionRegistry:
    """Which extensions exist on disk and which of them are enabled."""

    discovered: Dict[str, DiscoveredExtension] = field(default_factory=dict)
    modules: List[str] = field(default_factory=list)
    themes: List[str] = field(default_factory=list)
    profile: Optional[str] = None

    def module_exists(self, name: str) -> bool:
        return name in self.modules

    def theme_exists(self, name: str) -> bool:
        return name in self.themes

    @property
    def install_profile(self) -> Optional[str]:
        return self.profile

    def resolve(self, extension: str) -> ExtensionType:
        return resolve_extension_type(
            extension,
            self.module_exists,
            self.theme_exists,
            self.install_profile,
        )

    def path_of(self, extension: str) -> Path:
        entry = self.discovered.get(extension)
        if entry is None:
            raise ManifestError(f"No {INFO_SUFFIX} file found for extension {extension}.")
        return entry.path

    @classmethod
    def from_site(
        cls,
        site_dir: Path,
        search_dirs: Sequence[str],
        store: ActiveStore,
        profile: Optional[str] = None,
    ) -> "ExtensionRegistry":
        """Build a registry from the site tree and the ``core.extension`` record."""

        discovered = discover_extensions(site_dir / entry for entry in search_dirs)
        record = read_extension_record(store)
        profile_name = record.get("profile")

        return cls(
            discovered=discovered,
            modules=extension_names(record, "module"),
            themes=extension_names(record, "theme"),
            profile=profile or (str(profile_name) if profile_name else None),
        )


__all__ = [
    "DiscoveredExtension",
    "ExtensionRegistry",
    "ExtensionType",
    "discover_extensions",
    "resolve_extension_type",
]
