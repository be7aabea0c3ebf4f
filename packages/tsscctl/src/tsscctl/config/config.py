"""Installer configuration facade.

``Config`` pairs the structure-preserving ``Document`` with the typed ``Spec``
decoded from its ``tssc`` subtree. Every mutation goes through the document;
``decode()`` refreshes the spec afterwards (``apply_overrides`` does it for you).

Instances are meant for one caller at a time. A host sharing a loaded
configuration between threads must hold one lock per instance around
``set``/``set_many``/``set_product``/``apply_overrides``/``serialize``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from .document import Document, MappingNode, ScalarNode, SequenceNode
from .errors import ErrorKind, config_error
from .flatten import flatten
from .overrides import SETTING_KEY
from .source import DEFAULT_RELATIVE_CONFIG_PATH, ByteSource, default_source
from .spec import ROOT_KEY, Product, Spec


class Config:
    def __init__(self, document: Document) -> None:
        self.document = document
        self.spec = self.decode()

    @classmethod
    def from_bytes(cls, payload: bytes | str) -> "Config":
        """Parse, decode and validate a configuration payload."""

        config = cls(Document.parse(payload))
        config.validate()
        return config

    @classmethod
    def from_file(cls, source: ByteSource, path: str) -> "Config":
        return cls.from_bytes(source.read_file(path))

    @classmethod
    def default(cls, source: ByteSource | None = None) -> "Config":
        """Load ``installer/config.yaml`` from ``source`` (working directory over bundled data)."""

        return cls.from_file(source or default_source(), DEFAULT_RELATIVE_CONFIG_PATH)

    def _root_mapping(self) -> MappingNode:
        root = self.document.root
        if not isinstance(root, MappingNode):
            raise config_error(ErrorKind.MISSING_ROOT_KEY, "invalid configuration: root must be a mapping")
        node = root.get(ROOT_KEY)
        if not isinstance(node, MappingNode):
            raise config_error(
                ErrorKind.MISSING_ROOT_KEY,
                f"invalid configuration: missing '{ROOT_KEY}' key",
                key=ROOT_KEY,
            )
        return node

    def decode(self) -> Spec:
        self.spec = Spec.decode(self.document.to_python(self._root_mapping()))
        return self.spec

    def validate(self) -> None:
        self.spec.validate()

    def get_product(self, name: str) -> Product:
        for product in self.spec.products:
            if product.name == name:
                return product
        raise config_error(ErrorKind.PRODUCT_NOT_FOUND, f"product '{name}' not found", name=name)

    def get_enabled_products(self) -> list[Product]:
        return [product for product in self.spec.products if product.enabled]

    def serialize(self) -> bytes:
        return self.document.serialize()

    def __str__(self) -> str:
        return self.serialize().decode("utf-8")

    def set(self, key: str | Sequence[str], value: Any) -> None:
        """Update existing scalars addressed by ``key``.

        ``key`` is a dotted string or a list of segments; a leading ``tssc`` is
        optional. A mapping ``value`` is flattened below ``key`` and applied
        with ``set_many``. Keys are never created.
        """

        path = key.split(".") if isinstance(key, str) else list(key)
        if isinstance(value, Mapping):
            paths, values = flatten(value, ".".join(path))
            self.set_many(paths, values)
            return
        self._set_path(path, value)

    def set_many(self, paths: Sequence[str], values: Sequence[Any]) -> None:
        """Set each dotted path to the value at the same position.

        Stops at the first failure; updates applied before it are kept.
        """

        if len(paths) != len(values):
            raise config_error(
                ErrorKind.ARITY_MISMATCH,
                f"key value do not match: {len(paths)} paths for {len(values)} values",
                paths=len(paths),
                values=len(values),
            )
        for path, value in zip(paths, values):
            self._set_path(path.split("."), value)

    def set_product(self, name: str, values: Mapping[str, Any]) -> None:
        """Apply a nested mapping of updates inside the product entry ``name``."""

        paths, leaves = flatten(values)
        for path, value in zip(paths, leaves):
            self._update(self._product_mapping(name), path.split("."), value, f"products[{name}]")

    def apply_overrides(self, overrides: Mapping[str, Any]) -> None:
        """Apply a tree from ``parse_overrides`` then decode and validate."""

        for key, value in overrides.items():
            if key == SETTING_KEY:
                self.set([ROOT_KEY, "settings"], value)
            else:
                self.set_product(key, value)
        self.decode()
        self.validate()

    def _set_path(self, path: list[str], value: Any) -> None:
        dotted = ".".join(path)
        if len(path) < 2:
            raise config_error(ErrorKind.INVALID_KEY_PATH, f"invalid key set: {dotted}", path=dotted)
        segments = path[1:] if path[0] == ROOT_KEY else path
        self._update(self._root_mapping(), segments, value, ROOT_KEY)

    def _update(self, base: MappingNode, segments: list[str], value: Any, label: str) -> None:
        node = base
        for index, segment in enumerate(segments[:-1]):
            child = node.get(segment)
            if not isinstance(child, MappingNode):
                missing = ".".join([label, *segments[: index + 1]])
                raise config_error(
                    ErrorKind.PATH_NOT_FOUND,
                    f"not able to update configuration: {missing} is not a mapping in the configuration",
                    path=missing,
                )
            node = child
        dotted = ".".join([label, *segments])
        target = node.get(segments[-1])
        if target is None:
            raise config_error(
                ErrorKind.KEY_NOT_FOUND,
                f"no key: {segments[-1]} found in configuration ({dotted})",
                key=segments[-1],
                path=dotted,
            )
        if not isinstance(target, ScalarNode):
            raise config_error(
                ErrorKind.INVALID_VALUE,
                f"{dotted} holds a {'sequence' if isinstance(target, SequenceNode) else 'mapping'}, "
                "only scalar values can be set",
                path=dotted,
            )
        self.document.replace_scalar(target, value)

    def _product_mapping(self, name: str) -> MappingNode:
        products = self._root_mapping().get("products")
        if isinstance(products, SequenceNode):
            for item in products.items:
                if not isinstance(item, MappingNode):
                    continue
                item_name = item.get("name")
                if isinstance(item_name, ScalarNode) and item_name.value == name:
                    return item
        raise config_error(ErrorKind.PRODUCT_NOT_FOUND, f"product '{name}' not found", name=name)
