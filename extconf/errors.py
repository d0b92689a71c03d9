"""Exception types raised by extconf."""

from __future__ import annotations


class ExtconfError(RuntimeError):
    """Base class for all extconf failures."""


class UnknownExtension(ExtconfError):
    """Raised when a name is neither an enabled module, theme nor the profile."""

    def __init__(self, extension: str) -> None:
        super().__init__(f"Extension {extension} is not enabled.")
        self.extension = extension


class ManifestError(ExtconfError):
    """Signals a missing or malformed extension info file."""


class RecordDecodeError(ExtconfError):
    """Raised by the codec when a payload is not a YAML mapping."""


class StorageError(ExtconfError):
    """Failure inside an active store."""


class RecordNotFound(StorageError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Configuration {name} does not exist in active storage.")
        self.name = name


class EntityStorageError(StorageError):
    """Raised when an entity cannot be saved."""


__all__ = [
    "EntityStorageError",
    "ExtconfError",
    "ManifestError",
    "RecordDecodeError",
    "RecordNotFound",
    "StorageError",
    "UnknownExtension",
]
