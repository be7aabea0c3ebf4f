"""Typed projection of the ``tssc`` configuration subtree."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from typing import Any

import jsonschema

from .errors import ErrorKind, config_error

ROOT_KEY = "tssc"
SCHEMA_RESOURCE = "tssc-config.schema.json"


@lru_cache(maxsize=1)
def load_schema() -> dict[str, Any]:
    payload = resources.files(__package__).joinpath("schemas").joinpath(SCHEMA_RESOURCE).read_text(encoding="utf-8")
    return json.loads(payload)


@dataclass
class Product:
    """One integration target of the installer."""

    name: str
    enabled: bool = False
    namespace: str | None = None
    properties: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> "Product":
        return cls(
            name=str(payload.get("name") or ""),
            enabled=bool(payload.get("enabled") or False),
            namespace=payload.get("namespace"),
            properties=dict(payload.get("properties") or {}),
        )

    def get_namespace(self) -> str:
        return self.namespace or ""

    def key_name(self) -> str:
        return self.name.lower().replace(" ", "_")

    def validate(self) -> None:
        if not self.name:
            raise config_error(ErrorKind.INVALID_PRODUCT, "invalid configuration: missing product name")
        if self.enabled and not self.get_namespace():
            raise config_error(
                ErrorKind.INVALID_PRODUCT,
                f"invalid configuration: missing namespace for product {self.name!r}",
                product=self.name,
            )


@dataclass
class Spec:
    # Installer namespace; Helm charts deployed by the installer may use others.
    namespace: str
    settings: dict[str, Any] | None
    products: list[Product]

    @classmethod
    def decode(cls, payload: Any) -> "Spec":
        """Decode the plain data found under ``tssc``; shape errors raise ``DecodeError``."""

        try:
            jsonschema.validate(payload, load_schema())
        except jsonschema.ValidationError as exc:
            pointer = "/".join(str(p) for p in exc.absolute_path)
            loc = pointer or "<root>"
            raise config_error(
                ErrorKind.DECODE_ERROR,
                f"failed to decode configuration at {ROOT_KEY}/{loc}: {exc.message}",
                path=loc,
            ) from exc
        settings = payload.get("settings")
        return cls(
            namespace=payload.get("namespace") or "",
            settings=dict(settings) if settings is not None else None,
            products=[Product.from_json(item) for item in payload.get("products") or []],
        )

    def validate(self) -> None:
        if not self.namespace:
            raise config_error(ErrorKind.MISSING_NAMESPACE, "invalid configuration: missing namespace")
        if self.settings is None:
            raise config_error(ErrorKind.MISSING_SETTINGS, "invalid configuration: missing settings")
        for product in self.products:
            product.validate()
