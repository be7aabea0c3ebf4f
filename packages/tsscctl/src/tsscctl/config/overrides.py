"""Parse ``--set KEY=VALUE`` tokens into a merged override tree.

Two key grammars are accepted:

- plain settings, ``some.nested.key=value``, collected verbatim under the
  ``setting`` branch;
- product scoped keys, ``Product[<name>].some.nested.key=value``, expanded into
  a nested tree under the product name. Any key containing ``product``
  (case-insensitive) uses this grammar.

Values spelled ``true``/``false`` in any case become booleans; every other value
stays a string.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from .errors import ErrorKind, config_error
from .flatten import coerce_bool, deep_merge, expand

SETTING_KEY = "setting"

_PRODUCT_RE = re.compile(r"product", re.IGNORECASE)
_BRACKET_RE = re.compile(r"\[([^\]]+)\]")


def parse_overrides(tokens: Iterable[str]) -> dict[str, Any]:
    tree: dict[str, Any] = {}
    for token in tokens:
        key, sep, raw = token.partition("=")
        if not sep:
            raise config_error(
                ErrorKind.INVALID_SET_FORMAT,
                f"invalid --set format: {token} (expected key=value)",
                token=token,
            )
        tree = deep_merge(tree, parse_override_key(key, raw))
    return tree


def parse_override_key(key: str, raw: str) -> dict[str, Any]:
    value = coerce_bool(raw)
    if _PRODUCT_RE.search(key):
        return _parse_product_key(key, value)
    return {SETTING_KEY: {key: value}}


def _parse_product_key(key: str, value: Any) -> dict[str, Any]:
    selector, sep, property_path = key.partition(".")
    if not sep:
        raise config_error(
            ErrorKind.INVALID_PRODUCT_KEY_FORMAT,
            f"invalid product key format: {key} (expected Product[Name].property)",
            key=key,
        )
    name = extract_product_name(selector)
    return {name: expand({property_path: value})}


def extract_product_name(selector: str) -> str:
    match = _BRACKET_RE.search(selector)
    if match is None:
        raise config_error(
            ErrorKind.MISSING_PRODUCT_NAME,
            f"failed to extract product name from {selector}: no product name found in brackets",
            selector=selector,
        )
    return match.group(1)
