"""Synchronization between extension config files and active storage."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Literal, Optional, Sequence, Tuple

from .codec import YamlCodec
from .dependencies import enabled_extensions as read_enabled_extensions, missing_dependencies
from .errors import RecordDecodeError, StorageError
from .extensions import ExtensionRegistry, ExtensionType
from .manifest import ConfigCategory, ExtensionManifest, read_manifest
from .storage import (
    ActiveStore,
    EntityRecord,
    EntityRegistry,
    EntityStorage,
    TRANSIENT_KEYS,
    UUID_KEY,
    strip_transient,
)

logger = logging.getLogger("extconf.manager")

MessageLevel = Literal["success", "warning", "error"]

_LOG_LEVELS = {
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class ConfigStatus(IntEnum):
    DEFAULT = 1
    MISSING_IN_EXTENSION = 2
    MISSING_IN_ACTIVE = 3
    OVERRIDDEN = 4

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").lower()


class OutcomeKind(str, Enum):
    EXPORTED = "exported"
    IMPORTED = "imported"
    DELETED = "deleted"
    MISSING_IN_ACTIVE = "missing-in-active"
    UNREADABLE = "unreadable"
    NOT_FOUND = "not-found"
    FAILED = "failed"


@dataclass
class SyncMessage:
    level: MessageLevel
    text: str


@dataclass
class SyncOutcome:
    """What happened to a single record."""

    name: str
    category: ConfigCategory
    kind: OutcomeKind
    level: MessageLevel
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category.value,
            "kind": self.kind.value,
            "level": self.level,
            "message": self.message,
        }


@dataclass
class SyncReport:
    """Per-record outcomes of export, import or delete."""

    operation: str
    extension: str
    extension_type: ExtensionType
    outcomes: List[SyncOutcome] = field(default_factory=list)

    @property
    def messages(self) -> List[SyncMessage]:
        return [SyncMessage(level=o.level, text=o.message) for o in self.outcomes]

    def by_level(self, level: MessageLevel) -> List[SyncOutcome]:
        return [outcome for outcome in self.outcomes if outcome.level == level]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "extension": self.extension,
            "extension_type": self.extension_type.value,
            "outcomes": [outcome.to_dict() for outcome in self.outcomes],
        }


@dataclass
class StatusRow:
    name: str
    category: ConfigCategory
    status: ConfigStatus


@dataclass
class StatusReport:
    extension: str
    extension_type: ExtensionType
    rows: List[StatusRow] = field(default_factory=list)
    messages: List[SyncMessage] = field(default_factory=list)

    def status_of(self, name: str) -> Optional[ConfigStatus]:
        for row in self.rows:
            if row.name == name:
                return row.status
        return None


class ConfigSyncManager:
    """Exports, imports, deletes and compares an extension's configuration."""

    def __init__(
        self,
        store: ActiveStore,
        extensions: ExtensionRegistry,
        entities: Optional[EntityRegistry] = None,
        codec: Optional[YamlCodec] = None,
    ) -> None:
        self.store = store
        self.extensions = extensions
        self.entities = entities or EntityRegistry()
        self.entity_storage = EntityStorage(store)
        self.codec = codec or YamlCodec()

    # ------------------------------------------------------------------ helpers

    def _load(self, extension: str) -> Tuple[ExtensionType, ExtensionManifest]:
        ext_type = self.extensions.resolve(extension)
        manifest = read_manifest(
            self.extensions.path_of(extension),
            extension,
            extension_type=ext_type.value,
        )
        return ext_type, manifest

    def _declared(self, manifest: ExtensionManifest) -> Iterator[Tuple[ConfigCategory, Path, str]]:
        for category in ConfigCategory:
            directory = manifest.directory(category)
            for name in manifest.names(category):
                yield category, directory, name

    def _file_path(self, directory: Path, name: str) -> Path:
        return directory / f"{name}.{self.codec.extension}"

    def _read_file(self, path: Path) -> Dict[str, Any]:
        return self.codec.decode(path.read_text(encoding="utf-8"))

    @staticmethod
    def _record(
        report: SyncReport,
        name: str,
        category: ConfigCategory,
        kind: OutcomeKind,
        level: MessageLevel,
        message: str,
    ) -> None:
        report.outcomes.append(
            SyncOutcome(name=name, category=category, kind=kind, level=level, message=message)
        )
        logger.log(_LOG_LEVELS[level], "[%s] %s", report.operation, message)

    # --------------------------------------------------------------- operations

    def export_config(self, extension: str) -> SyncReport:
        """Write the active copy of every declared record into the extension."""

        ext_type, manifest = self._load(extension)
        report = SyncReport(operation="export", extension=extension, extension_type=ext_type)

        for category, directory, name in self._declared(manifest):
            file_path = self._file_path(directory, name)
            try:
                file_path.parent.mkdir(parents=True, exist_ok=True)
                if not self.store.exists(name):
                    self._record(
                        report, name, category, OutcomeKind.MISSING_IN_ACTIVE, "warning",
                        f"Config {name} is missing in active storage.",
                    )
                    continue
                data = strip_transient(self.store.read(name))
                file_path.write_text(self.codec.encode(data), encoding="utf-8")
            except (OSError, StorageError) as exc:
                self._record(
                    report, name, category, OutcomeKind.FAILED, "error",
                    f"Failed to export {name}: {exc}",
                )
                continue
            self._record(report, name, category, OutcomeKind.EXPORTED, "success", f"Exported {name}.")

        return report

    def import_config(self, extension: str) -> SyncReport:
        """Load every declared record from the extension into active storage."""

        ext_type, manifest = self._load(extension)
        report = SyncReport(operation="import", extension=extension, extension_type=ext_type)

        for category, directory, name in self._declared(manifest):
            file_path = self._file_path(directory, name)
            try:
                data = self._read_file(file_path)
            except (OSError, RecordDecodeError) as exc:
                logger.debug("Unreadable %s: %s", file_path, exc)
                self._record(
                    report, name, category, OutcomeKind.UNREADABLE, "error",
                    f"Could not read file {file_path}",
                )
                continue

            target = self.entities.target_for(name)
            try:
                if isinstance(target, EntityRecord):
                    self._import_entity(target, name, data)
                else:
                    self.store.write(name, data)
            except StorageError as exc:
                self._record(
                    report, name, category, OutcomeKind.FAILED, "error",
                    f"Failed to import {name}: {exc}",
                )
                continue
            self._record(report, name, category, OutcomeKind.IMPORTED, "success", f"Imported {name}")

        return report

    def _import_entity(self, target: EntityRecord, name: str, data: Dict[str, Any]) -> None:
        kind = target.kind
        entity_id = self.entities.derive_id(name, kind)
        data[kind.id_key] = entity_id

        entity = self.entity_storage.create(kind, data)
        existing = self.entity_storage.load(kind, entity_id)
        if existing is not None:
            entity.set(UUID_KEY, existing.uuid).enforce_is_new(False)
        self.entity_storage.save(entity)

    def delete_config(self, extension: str) -> SyncReport:
        """Remove every declared record from active storage."""

        ext_type, manifest = self._load(extension)
        report = SyncReport(operation="delete", extension=extension, extension_type=ext_type)

        for category, _directory, name in self._declared(manifest):
            if not self.store.exists(name):
                self._record(
                    report, name, category, OutcomeKind.NOT_FOUND, "warning",
                    f"Configuration {name} was not found.",
                )
                continue
            try:
                self.store.delete(name)
            except StorageError as exc:
                self._record(
                    report, name, category, OutcomeKind.FAILED, "error",
                    f"Failed to delete {name}: {exc}",
                )
                continue
            self._record(report, name, category, OutcomeKind.DELETED, "success", f"Deleted {name}.")

        return report

    def find_untracked_files(self, extension: str) -> List[Path]:
        """Config files shipped by the extension that its info file does not list."""

        _ext_type, manifest = self._load(extension)
        untracked: List[Path] = []
        for category in ConfigCategory:
            directory = manifest.directory(category)
            if not directory.is_dir():
                continue
            declared = set(manifest.names(category))
            for path in sorted(directory.glob(f"*.{self.codec.extension}")):
                if path.is_file() and path.stem not in declared:
                    untracked.append(path)
        return untracked

    def status(
        self,
        extension: str,
        enabled_extensions: Optional[Sequence[str]] = None,
        all_config: Optional[Sequence[str]] = None,
    ) -> StatusReport:
        """Compare the shipped and active copy of every declared record."""

        ext_type, manifest = self._load(extension)
        if enabled_extensions is None:
            enabled_extensions = read_enabled_extensions(self.store)
        if all_config is None:
            all_config = self.store.list_all()

        report = StatusReport(extension=extension, extension_type=ext_type)

        for category, directory, name in self._declared(manifest):
            try:
                stored = self._read_file(self._file_path(directory, name))
            except (OSError, RecordDecodeError):
                report.rows.append(StatusRow(name, category, ConfigStatus.MISSING_IN_EXTENSION))
                continue

            for dependency in missing_dependencies(name, stored, enabled_extensions, all_config):
                text = f"Configuration {name} has missing dependency {dependency}."
                report.messages.append(SyncMessage(level="error", text=text))
                logger.error("[status] %s", text)

            if not self.store.exists(name):
                report.rows.append(StatusRow(name, category, ConfigStatus.MISSING_IN_ACTIVE))
                continue

            try:
                active = strip_transient(self.store.read(name), TRANSIENT_KEYS)
            except StorageError as exc:
                text = f"Could not read active configuration {name}: {exc}"
                report.messages.append(SyncMessage(level="error", text=text))
                logger.error("[status] %s", text)
                report.rows.append(StatusRow(name, category, ConfigStatus.OVERRIDDEN))
                continue

            state = (
                ConfigStatus.DEFAULT
                if active == strip_transient(stored, TRANSIENT_KEYS)
                else ConfigStatus.OVERRIDDEN
            )
            report.rows.append(StatusRow(name, category, state))

        return report


__all__ = [
    "ConfigStatus",
    "ConfigSyncManager",
    "MessageLevel",
    "OutcomeKind",
    "StatusReport",
    "StatusRow",
    "SyncMessage",
    "SyncOutcome",
    "SyncReport",
]
