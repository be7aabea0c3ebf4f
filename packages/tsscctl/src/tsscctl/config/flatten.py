"""Conversions between nested mappings and dotted key paths."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .errors import ErrorKind, config_error


def _key_text(key: object) -> str:
    if isinstance(key, bool):
        return "true" if key else "false"
    return str(key)


def flatten(data: Mapping[Any, Any], prefix: str = "") -> tuple[list[str], list[Any]]:
    """Flatten a nested mapping into parallel lists of dotted paths and leaf values.

    Recursion follows mapping values only; lists, scalars and ``None`` are
    leaves. Keys of any type are stringified. Order follows the input mapping.
    """

    paths: list[str] = []
    values: list[Any] = []
    # LIFO worklist; children are pushed reversed so output keeps input order.
    pending = list(reversed(_children(prefix, data)))
    while pending:
        path, value = pending.pop()
        if isinstance(value, Mapping):
            pending.extend(reversed(_children(path, value)))
            continue
        paths.append(path)
        values.append(value)
    return paths, values


def _children(prefix: str, data: Mapping[Any, Any]) -> list[tuple[str, Any]]:
    return [(_join(prefix, _key_text(key)), value) for key, value in data.items()]


def _join(prefix: str, key: str) -> str:
    return f"{prefix}.{key}" if prefix else key


def expand(flat: Mapping[str, Any]) -> dict[str, Any]:
    """Build a nested dict from a mapping whose keys are dotted paths."""

    result: dict[str, Any] = {}
    for key, value in flat.items():
        parts = key.split(".")
        current = result
        for part in parts[:-1]:
            if part not in current:
                current[part] = {}
            nxt = current[part]
            if not isinstance(nxt, dict):
                raise config_error(
                    ErrorKind.PATH_CONFLICT,
                    f"conflict at key {part!r} while expanding {key!r}",
                    key=key,
                    segment=part,
                )
            current = nxt
        current[parts[-1]] = value
    return result


def deep_merge(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Deep merge two mappings (overlay wins).

    - If both values are mappings, merge recursively.
    - Otherwise, the overlay replaces the base.
    """

    out: dict[str, Any] = dict(base)
    for key, value in overlay.items():
        if key in out and isinstance(out[key], Mapping) and isinstance(value, Mapping):
            out[key] = deep_merge(out[key], value)
        else:
            out[key] = value
    return out


def coerce_bool(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    lowered = value.lower()
    if lowered in {"true", "false"}:
        return lowered == "true"
    return value
