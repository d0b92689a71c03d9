"""YAML encoding for configuration records."""

from __future__ import annotations

from typing import Any, Dict, Mapping

import yaml

from .errors import RecordDecodeError

FILE_EXTENSION = "yml"


class YamlCodec:
    """Encodes records the way extension config files are shipped.

    Keys keep their insertion order so an export followed by another export
    with no active-store change produces byte-identical files.
    """

    extension = FILE_EXTENSION

    def encode(self, data: Mapping[str, Any]) -> str:
        return yaml.safe_dump(
            dict(data),
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
            indent=2,
        )

    def decode(self, raw: str) -> Dict[str, Any]:
        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise RecordDecodeError(f"Invalid YAML: {exc}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise RecordDecodeError(
                f"Expected a mapping, got {type(data).__name__}."
            )
        return data


__all__ = ["FILE_EXTENSION", "YamlCodec"]
