"""Scanner settings and the resume-point file."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from contextlib import suppress
from dataclasses import dataclass, fields
from ipaddress import IPv4Address
from pathlib import Path
from typing import Any


def _check(name: str, value: Any, kind: str) -> None:
    if kind == "str":
        ok = isinstance(value, str)
    elif kind == "bool":
        ok = isinstance(value, bool)
    else:
        ok = isinstance(value, int) and not isinstance(value, bool) and value >= 0
    if not ok:
        expected = {"str": "a string", "bool": "a boolean"}.get(kind, "a non-negative integer")
        raise ValueError(f"field `{name}` must be {expected}, got {value!r}")


@dataclass(frozen=True)
class Settings:
    """Configuration for a scan run."""

    cidr: str
    exclude_file: str
    worker_count: int
    connection_timeout_secs: int
    use_tor: bool
    validate: bool
    validate_worker_count: int

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Settings:
        """Build settings from a mapping, rejecting missing or mistyped fields."""
        if not isinstance(data, Mapping):
            raise ValueError("settings must be a JSON object")
        values = {}
        for field in fields(cls):
            if field.name not in data:
                raise ValueError(f"missing field `{field.name}`")
            value = data[field.name]
            _check(field.name, value, str(field.type))
            values[field.name] = value
        return cls(**values)


def load_settings(path: str | os.PathLike[str]) -> Settings:
    """Load settings from a JSON file.

    Raises ``OSError`` if the file cannot be read and ``ValueError`` if its
    contents are not valid settings.
    """
    text = Path(path).read_text(encoding="utf-8")
    return Settings.from_dict(json.loads(text))


def read_last_ip(path: str | os.PathLike[str]) -> IPv4Address | None:
    """Return the address stored in ``path``, or None if there is none."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    try:
        return IPv4Address(text.strip())
    except ValueError:
        return None


def write_last_ip(path: str | os.PathLike[str], ip: str | int | IPv4Address) -> None:
    """Record ``ip`` in ``path``; failures to write are ignored."""
    with suppress(OSError):
        Path(path).write_text(str(IPv4Address(ip)), encoding="utf-8")