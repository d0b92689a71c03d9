"""Active configuration storage and the config entity layer."""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from .codec import YamlCodec
from .errors import EntityStorageError, RecordDecodeError, RecordNotFound, StorageError

logger = logging.getLogger("extconf.storage")

UUID_KEY = "uuid"
CORE_KEY = "_core"
TRANSIENT_KEYS = (CORE_KEY, UUID_KEY)


class ActiveStore(ABC):
    """Live configuration keyed by record name."""

    @abstractmethod
    def exists(self, name: str) -> bool:
        ...

    @abstractmethod
    def read(self, name: str) -> Dict[str, Any]:
        """Return a copy of the record, raising ``RecordNotFound`` if absent."""

    @abstractmethod
    def write(self, name: str, data: Dict[str, Any]) -> None:
        ...

    @abstractmethod
    def delete(self, name: str) -> None:
        ...

    @abstractmethod
    def list_all(self, prefix: str = "") -> List[str]:
        ...


class MemoryActiveStore(ActiveStore):
    """Dictionary-backed store for embedding and tests."""

    def __init__(self, records: Optional[Dict[str, Dict[str, Any]]] = None) -> None:
        self._records: Dict[str, Dict[str, Any]] = deepcopy(records or {})

    def exists(self, name: str) -> bool:
        return name in self._records

    def read(self, name: str) -> Dict[str, Any]:
        if name not in self._records:
            raise RecordNotFound(name)
        return deepcopy(self._records[name])

    def write(self, name: str, data: Dict[str, Any]) -> None:
        self._records[name] = deepcopy(dict(data))

    def delete(self, name: str) -> None:
        if self._records.pop(name, None) is None:
            raise RecordNotFound(name)

    def list_all(self, prefix: str = "") -> List[str]:
        return sorted(name for name in self._records if name.startswith(prefix))


class DirectoryActiveStore(ActiveStore):
    """Stores each record as ``<directory>/<name>.yml``."""

    def __init__(self, directory: Path, codec: Optional[YamlCodec] = None) -> None:
        self.directory = directory
        self.codec = codec or YamlCodec()

    def _path(self, name: str) -> Path:
        return self.directory / f"{name}.{self.codec.extension}"

    def exists(self, name: str) -> bool:
        return self._path(name).is_file()

    def read(self, name: str) -> Dict[str, Any]:
        path = self._path(name)
        if not path.is_file():
            raise RecordNotFound(name)
        try:
            return self.codec.decode(path.read_text(encoding="utf-8"))
        except (OSError, RecordDecodeError) as exc:
            raise StorageError(f"Failed to read {path}: {exc}") from exc

    def write(self, name: str, data: Dict[str, Any]) -> None:
        path = self._path(name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.codec.encode(data), encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Failed to write {path}: {exc}") from exc
        logger.debug("Wrote active record %s", name)

    def delete(self, name: str) -> None:
        path = self._path(name)
        if not path.is_file():
            raise RecordNotFound(name)
        try:
            path.unlink()
        except OSError as exc:
            raise StorageError(f"Failed to remove {path}: {exc}") from exc

    def list_all(self, prefix: str = "") -> List[str]:
        if not self.directory.is_dir():
            return []
        suffix = f".{self.codec.extension}"
        names = [
            path.name[: -len(suffix)]
            for path in self.directory.glob(f"*{suffix}")
            if path.is_file()
        ]
        return sorted(name for name in names if name.startswith(prefix))


def strip_transient(data: Dict[str, Any], keys: Sequence[str] = TRANSIENT_KEYS) -> Dict[str, Any]:
    """Return a copy of ``data`` without bookkeeping keys."""

    return {key: value for key, value in data.items() if key not in keys}


@dataclass(frozen=True)
class EntityKind:
    """A structured entity type whose records share a name prefix."""

    entity_type: str
    config_prefix: str
    id_key: str = "id"

    def config_name(self, entity_id: str) -> str:
        return f"{self.config_prefix}.{entity_id}"


@dataclass
class ConfigEntity:
    kind: EntityKind
    data: Dict[str, Any] = field(default_factory=dict)
    is_new: bool = True

    @property
    def id(self) -> Optional[str]:
        value = self.data.get(self.kind.id_key)
        return None if value is None else str(value)

    @property
    def uuid(self) -> Optional[str]:
        return self.data.get(UUID_KEY)

    def set(self, key: str, value: Any) -> "ConfigEntity":
        self.data[key] = value
        return self

    def enforce_is_new(self, value: bool = True) -> "ConfigEntity":
        self.is_new = value
        return self


@dataclass(frozen=True)
class PlainRecord:
    """Import target written straight into the active store."""


@dataclass(frozen=True)
class EntityRecord:
    """Import target that goes through the entity layer."""

    kind: EntityKind


RecordTarget = Union[PlainRecord, EntityRecord]


class EntityRegistry:
    """Maps configuration names onto entity kinds by prefix."""

    def __init__(self, kinds: Optional[Iterable[EntityKind]] = None) -> None:
        self._kinds: Dict[str, EntityKind] = {}
        for kind in kinds or []:
            self.register(kind)

    def register(self, kind: EntityKind) -> None:
        self._kinds[kind.entity_type] = kind

    def kinds(self) -> List[EntityKind]:
        return list(self._kinds.values())

    def get(self, entity_type: str) -> Optional[EntityKind]:
        return self._kinds.get(entity_type)

    def lookup(self, name: str) -> Optional[EntityKind]:
        """Return the kind with the longest prefix matching ``name``."""

        best: Optional[EntityKind] = None
        for kind in self._kinds.values():
            if not name.startswith(kind.config_prefix + "."):
                continue
            if best is None or len(kind.config_prefix) > len(best.config_prefix):
                best = kind
        return best

    @staticmethod
    def derive_id(name: str, kind: EntityKind) -> str:
        return name[len(kind.config_prefix) + 1:]

    def target_for(self, name: str) -> RecordTarget:
        kind = self.lookup(name)
        if kind is None:
            return PlainRecord()
        return EntityRecord(kind=kind)

    @classmethod
    def from_config(cls, raw: Any) -> "EntityRegistry":
        kinds: List[EntityKind] = []
        for item in raw or []:
            if not isinstance(item, dict):
                continue
            entity_type = item.get("entity_type")
            prefix = item.get("config_prefix")
            if not entity_type or not prefix:
                logger.warning("Skipping entity definition without type or prefix: %r", item)
                continue
            kinds.append(
                EntityKind(
                    entity_type=str(entity_type),
                    config_prefix=str(prefix),
                    id_key=str(item.get("id_key", "id")),
                )
            )
        return cls(kinds)


class EntityStorage:
    """Creates, loads and saves config entities on top of an active store."""

    def __init__(self, store: ActiveStore) -> None:
        self.store = store

    def create(self, kind: EntityKind, payload: Dict[str, Any]) -> ConfigEntity:
        data = deepcopy(dict(payload))
        data.setdefault(UUID_KEY, str(uuid.uuid4()))
        return ConfigEntity(kind=kind, data=data, is_new=True)

    def load(self, kind: EntityKind, entity_id: str) -> Optional[ConfigEntity]:
        name = kind.config_name(entity_id)
        if not self.store.exists(name):
            return None
        return ConfigEntity(kind=kind, data=self.store.read(name), is_new=False)

    def save(self, entity: ConfigEntity) -> str:
        entity_id = entity.id
        if not entity_id:
            raise EntityStorageError(
                f"Cannot save {entity.kind.entity_type} entity without '{entity.kind.id_key}'."
            )
        name = entity.kind.config_name(entity_id)
        if entity.is_new and self.store.exists(name):
            raise EntityStorageError(
                f"'{entity.kind.entity_type}' entity with ID '{entity_id}' already exists."
            )
        self.store.write(name, entity.data)
        logger.debug(
            "%s %s entity %s",
            "Created" if entity.is_new else "Updated",
            entity.kind.entity_type,
            entity_id,
        )
        return name


__all__ = [
    "ActiveStore",
    "ConfigEntity",
    "CORE_KEY",
    "DirectoryActiveStore",
    "EntityKind",
    "EntityRecord",
    "EntityRegistry",
    "EntityStorage",
    "MemoryActiveStore",
    "PlainRecord",
    "RecordTarget",
    "TRANSIENT_KEYS",
    "UUID_KEY",
    "strip_transient",
]
