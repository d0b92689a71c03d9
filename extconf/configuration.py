"""Site-aware runtime configuration for extconf."""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, MutableMapping, Optional, Tuple

import yaml

REPO_ROOT = Path(__file__).resolve().parent.parent
DEFAULT_CONFIG_DIR = REPO_ROOT / "config"
SITE_DIR_ENV = "EXTCONF_SITE_DIR"

DiagnosticLevel = Literal["info", "warning", "error"]
ConfigurationStatus = Literal["ready", "missing", "invalid"]

SchemaSpec = Dict[str, Any]

DEFAULT_SEARCH_DIRS: List[str] = ["modules", "themes", "profiles"]


CONFIG_SCHEMA: SchemaSpec = {
    "runtime": {
        "type": dict,
        "schema": {
            "name": {"type": str, "default": "extconf"},
        },
        "default": {},
    },
    "logging": {
        "type": dict,
        "schema": {
            "level": {"type": str, "default": "WARNING"},
            "structured": {"type": bool, "default": False},
        },
        "default": {},
    },
    "storage": {
        "type": dict,
        "schema": {
            "active_dir": {"type": str, "default": "active"},
        },
        "default": {},
    },
    "extensions": {
        "type": dict,
        "schema": {
            "search_dirs": {
                "type": list,
                "item_type": str,
                "default_factory": lambda: list(DEFAULT_SEARCH_DIRS),
            },
            "profile": {"type": (str, type(None)), "default": None},
        },
        "default": {},
    },
    "entities": {
        "type": list,
        "item_type": dict,
        "default_factory": list,
    },
}


@dataclass
class Diagnostic:
    """Represents a configuration validation or loading issue."""

    level: DiagnosticLevel
    message: str
    source: Optional[Path] = None


@dataclass
class ConfigurationBundle:
    """Everything extconf needs to know about a site."""

    site_dir: Path
    status: ConfigurationStatus
    merged: Dict[str, Any] = field(default_factory=dict)
    defaults: Dict[str, Any] = field(default_factory=dict)
    site_overrides: Dict[str, Any] = field(default_factory=dict)
    files_loaded: List[Path] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    log_path: Optional[Path] = None

    def section(self, name: str) -> Dict[str, Any]:
        value = self.merged.get(name) if self.merged else None
        return value if isinstance(value, dict) else {}


def resolve_site_dir(
    env: Optional[Mapping[str, str]] = None,
    default: str = ".",
) -> Path:
    """Resolve the site root from the environment."""

    env_source = env or os.environ
    raw = env_source.get(SITE_DIR_ENV, default)
    return Path(raw).expanduser()


def load_runtime_configuration(site_dir: Optional[Path] = None) -> ConfigurationBundle:
    """Load packaged defaults and the site's overrides."""

    resolved_site = site_dir or resolve_site_dir()
    diagnostics: List[Diagnostic] = []
    files_loaded: List[Path] = []

    defaults, default_files = _load_directory_configs(
        DEFAULT_CONFIG_DIR,
        diagnostics,
        label="defaults",
    )
    files_loaded.extend(default_files)

    status: ConfigurationStatus = "ready"
    site_overrides: Dict[str, Any] = {}

    if not resolved_site.exists():
        diagnostics.append(
            Diagnostic(
                level="error",
                message=f"Site directory '{resolved_site}' does not exist.",
            )
        )
        status = "missing"
    elif not resolved_site.is_dir():
        diagnostics.append(
            Diagnostic(
                level="error",
                message=f"Site path '{resolved_site}' is not a directory.",
            )
        )
        status = "invalid"
    else:
        site_overrides, override_files = _load_directory_configs(
            resolved_site / "config",
            diagnostics,
            label="site overrides",
        )
        files_loaded.extend(override_files)

    merged = deepcopy(defaults)
    _deep_merge_dicts(merged, site_overrides)

    _validate_section(merged, CONFIG_SCHEMA, "config", diagnostics)

    if status == "ready" and any(diag.level == "error" for diag in diagnostics):
        status = "invalid"

    return ConfigurationBundle(
        site_dir=resolved_site,
        status=status,
        merged=merged,
        defaults=defaults,
        site_overrides=site_overrides,
        files_loaded=files_loaded,
        diagnostics=diagnostics,
    )


def _load_directory_configs(
    directory: Path,
    diagnostics: List[Diagnostic],
    label: str,
) -> Tuple[Dict[str, Any], List[Path]]:
    """Merge every YAML file of ``directory`` in filename order."""

    data: Dict[str, Any] = {}
    loaded_files: List[Path] = []

    if not directory.exists():
        diagnostics.append(
            Diagnostic(
                level="info",
                message=f"No configuration directory found at '{directory}' ({label}).",
                source=directory,
            )
        )
        return data, loaded_files

    if not directory.is_dir():
        diagnostics.append(
            Diagnostic(
                level="error",
                message=f"Configuration path '{directory}' ({label}) is not a directory.",
                source=directory,
            )
        )
        return data, loaded_files

    for yaml_file in sorted(list(directory.glob("*.yml")) + list(directory.glob("*.yaml"))):
        try:
            content = yaml.safe_load(yaml_file.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            diagnostics.append(
                Diagnostic(
                    level="error",
                    message=f"Failed to parse '{yaml_file}': {exc}",
                    source=yaml_file,
                )
            )
            continue

        if content is None:
            loaded_files.append(yaml_file)
            continue

        if not isinstance(content, MutableMapping):
            diagnostics.append(
                Diagnostic(
                    level="warning",
                    message=f"Ignoring '{yaml_file}' because it does not contain a mapping.",
                    source=yaml_file,
                )
            )
            continue

        _deep_merge_dicts(data, dict(content))
        loaded_files.append(yaml_file)

    return data, loaded_files


def _deep_merge_dicts(dest: MutableMapping[str, Any], source: Mapping[str, Any]) -> None:
    for key, value in source.items():
        if (
            key in dest
            and isinstance(dest[key], MutableMapping)
            and isinstance(value, Mapping)
        ):
            _deep_merge_dicts(dest[key], value)
        else:
            dest[key] = deepcopy(value)


def _default_from_spec(spec: SchemaSpec) -> Any:
    if callable(spec.get("default_factory")):
        return spec["default_factory"]()
    return deepcopy(spec.get("default"))


def _type_name(expected: Any) -> str:
    if isinstance(expected, tuple):
        return ", ".join(t.__name__ for t in expected)
    return expected.__name__


def _validate_section(
    target: Dict[str, Any],
    schema: SchemaSpec,
    path: str,
    diagnostics: List[Diagnostic],
) -> None:
    for key in target:
        if key not in schema:
            diagnostics.append(
                Diagnostic(
                    level="warning",
                    message=f"Unknown configuration key '{path}.{key}'.",
                )
            )

    for key, spec in schema.items():
        child_path = f"{path}.{key}"
        if key not in target:
            target[key] = _default_from_spec(spec)
            if spec.get("type") is dict:
                _validate_section(target[key], spec.get("schema", {}), child_path, [])
            continue

        value = target[key]
        expected_type = spec.get("type")

        if expected_type is dict:
            if not isinstance(value, dict):
                diagnostics.append(
                    Diagnostic(level="error", message=f"'{child_path}' must be a mapping.")
                )
                target[key] = value = {}
            _validate_section(value, spec.get("schema", {}), child_path, diagnostics)
        elif expected_type is list:
            if not isinstance(value, list):
                diagnostics.append(
                    Diagnostic(level="error", message=f"'{child_path}' must be a list.")
                )
                target[key] = _default_from_spec(spec)
                continue
            item_type = spec.get("item_type")
            if item_type is None:
                continue
            filtered: List[Any] = []
            for idx, item in enumerate(value):
                if isinstance(item, item_type):
                    filtered.append(item)
                else:
                    diagnostics.append(
                        Diagnostic(
                            level="error",
                            message=f"'{child_path}[{idx}]' must be of type {_type_name(item_type)}.",
                        )
                    )
            target[key] = filtered
        elif expected_type and not isinstance(value, expected_type):
            diagnostics.append(
                Diagnostic(
                    level="error",
                    message=f"'{child_path}' must be of type {_type_name(expected_type)}.",
                )
            )
            target[key] = _default_from_spec(spec)


__all__ = [
    "ConfigurationBundle",
    "ConfigurationStatus",
    "DEFAULT_CONFIG_DIR",
    "Diagnostic",
    "SITE_DIR_ENV",
    "load_runtime_configuration",
    "resolve_site_dir",
]
