"""Dependency checks for configuration records."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

from .storage import ActiveStore

EXTENSION_RECORD = "core.extension"
CORE_PROVIDER = "core"


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def missing_dependencies(
    config_name: str,
    data: Mapping[str, Any],
    enabled_extensions: Sequence[str],
    all_config: Sequence[str],
) -> List[str]:
    """Return the dependencies of ``data`` that are not currently satisfied.

    Args:
        config_name: Name of the record being validated.
        data: Decoded record.
        enabled_extensions: Enabled modules and themes.
        all_config: Names of every record in active storage.

    Returns:
        Missing dependencies in declaration order. Duplicates are kept.
    """
    declared = data.get("dependencies")
    if not isinstance(declared, Mapping):
        return []

    provider = config_name.split(".", 1)[0]
    all_dependencies: Dict[str, List[Any]] = {
        key: _as_list(value)
        for key, value in declared.items()
        if key != "enforced"
    }

    enforced = declared.get("enforced")
    if isinstance(enforced, Mapping):
        for key, value in enforced.items():
            all_dependencies.setdefault(key, []).extend(_as_list(value))

    # The provider of the record is always an implicit module dependency.
    modules = all_dependencies.setdefault("module", [])
    if provider not in modules:
        modules.append(provider)

    missing: List[str] = []
    for dependency_type, dependencies in all_dependencies.items():
        if dependency_type in ("module", "theme"):
            present = enabled_extensions
        elif dependency_type == "config":
            present = all_config
        else:
            continue
        if not present:
            continue
        lookup = set(present)
        missing.extend(str(dep) for dep in dependencies if dep not in lookup)

    return missing


def read_extension_record(store: ActiveStore) -> Dict[str, Any]:
    if not store.exists(EXTENSION_RECORD):
        return {}
    return store.read(EXTENSION_RECORD)


def extension_names(record: Mapping[str, Any], key: str) -> List[str]:
    """Names listed under ``key`` of a ``core.extension`` record.

    Accepts the usual name-to-weight mapping as well as a list or a bare name.
    """
    section = record.get(key)
    if isinstance(section, Mapping):
        return [str(name) for name in section.keys()]
    return [str(name) for name in _as_list(section)]


def enabled_extensions(store: ActiveStore) -> List[str]:
    """Enabled modules and themes, read live from ``core.extension``.

    Always includes ``core``.
    """
    record = read_extension_record(store)
    names = extension_names(record, "module") + extension_names(record, "theme")
    if CORE_PROVIDER not in names:
        names.append(CORE_PROVIDER)
    return list(dict.fromkeys(names))


__all__ = [
    "CORE_PROVIDER",
    "EXTENSION_RECORD",
    "enabled_extensions",
    "extension_names",
    "missing_dependencies",
    "read_extension_record",
]
