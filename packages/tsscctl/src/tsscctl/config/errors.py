"""Categorical failures raised by the configuration engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..errors import ScriptError
from ..exit_codes import ERR_CONFIG, ERR_USAGE, ERR_VALIDATION


class ErrorKind(str, Enum):
    EMPTY_PAYLOAD = "empty_payload"
    PARSE_ERROR = "parse_error"
    MISSING_ROOT_KEY = "missing_root_key"
    DECODE_ERROR = "decode_error"
    MISSING_NAMESPACE = "missing_namespace"
    MISSING_SETTINGS = "missing_settings"
    INVALID_PRODUCT = "invalid_product"
    PRODUCT_NOT_FOUND = "product_not_found"
    INVALID_KEY_PATH = "invalid_key_path"
    PATH_NOT_FOUND = "path_not_found"
    KEY_NOT_FOUND = "key_not_found"
    INVALID_VALUE = "invalid_value"
    ARITY_MISMATCH = "arity_mismatch"
    INVALID_SET_FORMAT = "invalid_set_format"
    INVALID_PRODUCT_KEY_FORMAT = "invalid_product_key_format"
    MISSING_PRODUCT_NAME = "missing_product_name"
    PATH_CONFLICT = "path_conflict"
    SOURCE_UNAVAILABLE = "source_unavailable"


_EXIT_CODES: dict[ErrorKind, int] = {
    ErrorKind.EMPTY_PAYLOAD: ERR_CONFIG,
    ErrorKind.PARSE_ERROR: ERR_CONFIG,
    ErrorKind.MISSING_ROOT_KEY: ERR_CONFIG,
    ErrorKind.DECODE_ERROR: ERR_CONFIG,
    ErrorKind.MISSING_NAMESPACE: ERR_VALIDATION,
    ErrorKind.MISSING_SETTINGS: ERR_VALIDATION,
    ErrorKind.INVALID_PRODUCT: ERR_VALIDATION,
    ErrorKind.PRODUCT_NOT_FOUND: ERR_CONFIG,
    ErrorKind.INVALID_KEY_PATH: ERR_USAGE,
    ErrorKind.PATH_NOT_FOUND: ERR_CONFIG,
    ErrorKind.KEY_NOT_FOUND: ERR_CONFIG,
    ErrorKind.INVALID_VALUE: ERR_USAGE,
    ErrorKind.ARITY_MISMATCH: ERR_USAGE,
    ErrorKind.INVALID_SET_FORMAT: ERR_USAGE,
    ErrorKind.INVALID_PRODUCT_KEY_FORMAT: ERR_USAGE,
    ErrorKind.MISSING_PRODUCT_NAME: ERR_USAGE,
    ErrorKind.PATH_CONFLICT: ERR_USAGE,
    ErrorKind.SOURCE_UNAVAILABLE: ERR_CONFIG,
}


@dataclass
class ConfigError(ScriptError):
    context: dict[str, object] = field(default_factory=dict)


def config_error(kind: ErrorKind, message: str, **context: object) -> ConfigError:
    return ConfigError(message, _EXIT_CODES[kind], kind, dict(context))
