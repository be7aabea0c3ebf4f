"""Structure-preserving YAML document tree.

The document keeps the exact source text next to a tree of tagged nodes
(``MappingNode``, ``SequenceNode``, ``ScalarNode``) composed from it. Every node
records the span it occupies in the source. Updating a scalar splices a newly
rendered lexical form into that span and composes the tree again, so comments,
key order and formatting outside the replaced scalar stay byte-identical.

A ``Document`` is not safe for concurrent mutation; callers sharing one
instance across threads must serialize ``replace_scalar`` and ``serialize``.
"""

from __future__ import annotations

import io
import math
import re
from dataclasses import dataclass, field
from typing import Any, Union

import yaml
from yaml.emitter import Emitter
from yaml.representer import SafeRepresenter
from yaml.resolver import Resolver

from .errors import ErrorKind, config_error

STR_TAG = "tag:yaml.org,2002:str"
MERGE_TAG = "tag:yaml.org,2002:merge"
DOCUMENT_MARKER = "---\n"

_QUOTED_STYLES = ("'", '"')
_BLOCK_STYLES = ("|", ">")
_NODE_PROPERTIES = re.compile(r"^(?:[&!]\S*(?:\s+|\Z))+")
_TRAILING_SPACE = re.compile(r"\s*\Z")
_RESOLVER = Resolver()
_REPRESENTER = SafeRepresenter()


@dataclass(eq=False)
class ScalarNode:
    tag: str
    value: str
    style: str | None
    start: int
    end: int
    flow: bool = False
    source: yaml.Node | None = field(default=None, repr=False)


@dataclass(eq=False)
class SequenceNode:
    tag: str
    items: list[Node]
    start: int
    end: int
    source: yaml.Node | None = field(default=None, repr=False)


@dataclass(eq=False)
class MappingNode:
    tag: str
    pairs: list[tuple[Node, Node]]
    start: int
    end: int
    source: yaml.Node | None = field(default=None, repr=False)

    def keys(self) -> list[str]:
        return [key.value for key, _ in self.pairs if isinstance(key, ScalarNode)]

    def get(self, key: str) -> Node | None:
        for item_key, value in self.pairs:
            if isinstance(item_key, ScalarNode) and item_key.value == key:
                return value
        return None


Node = Union[ScalarNode, SequenceNode, MappingNode]


def _build(raw: yaml.Node, flow: bool, seen: dict[int, Node]) -> Node:
    # Aliases compose to the same yaml node; keep them shared in the tree too.
    cached = seen.get(id(raw))
    if cached is not None:
        return cached
    start, end = raw.start_mark.index, raw.end_mark.index
    if isinstance(raw, yaml.ScalarNode):
        scalar = ScalarNode(raw.tag, raw.value, raw.style, start, end, flow, raw)
        seen[id(raw)] = scalar
        return scalar
    nested = flow or bool(raw.flow_style)
    if isinstance(raw, yaml.SequenceNode):
        sequence = SequenceNode(raw.tag, [], start, end, raw)
        seen[id(raw)] = sequence
        sequence.items.extend(_build(item, nested, seen) for item in raw.value)
        return sequence
    mapping = MappingNode(raw.tag, [], start, end, raw)
    seen[id(raw)] = mapping
    defined: set[tuple[str, str]] = set()
    for raw_key, raw_value in raw.value:
        key = _build(raw_key, nested, seen)
        if isinstance(key, ScalarNode) and key.tag != MERGE_TAG:
            if (key.tag, key.value) in defined:
                line = raw_key.start_mark.line + 1
                raise config_error(
                    ErrorKind.PARSE_ERROR,
                    f"failed to parse configuration: line {line}: mapping key {key.value!r} already defined",
                    key=key.value,
                    line=line,
                )
            defined.add((key.tag, key.value))
        mapping.pairs.append((key, _build(raw_value, nested, seen)))
    return mapping


def _compose(text: str) -> tuple[Node | None, bool]:
    try:
        explicit_start = False
        for event in yaml.parse(text, Loader=yaml.SafeLoader):
            if isinstance(event, yaml.DocumentStartEvent):
                explicit_start = bool(event.explicit)
                break
        raw = yaml.compose(text, Loader=yaml.SafeLoader)
    except yaml.YAMLError as exc:
        raise config_error(ErrorKind.PARSE_ERROR, f"failed to parse configuration: {exc}") from exc
    if raw is None:
        return None, explicit_start
    return _build(raw, False, {}), explicit_start


def _represent(value: Any) -> yaml.ScalarNode:
    if isinstance(value, str):
        return _REPRESENTER.represent_str(value)
    if value is None:
        return _REPRESENTER.represent_none(value)
    if isinstance(value, bool):
        return _REPRESENTER.represent_bool(value)
    if isinstance(value, int):
        return _REPRESENTER.represent_int(value)
    if isinstance(value, float):
        return _REPRESENTER.represent_float(value)
    raise config_error(
        ErrorKind.INVALID_VALUE,
        f"unsupported value type {type(value).__name__}: only scalars can be set",
        value=repr(value),
    )


def scalar_text(value: Any) -> str:
    """Lexical form written for ``value`` when it replaces a scalar."""

    return _represent(value).value


def _quote(text: str, style: str) -> str:
    dumped = yaml.dump(text, default_style=style, allow_unicode=True, width=math.inf)
    return dumped.rstrip("\n")


def render_scalar(node: ScalarNode, value: Any) -> str:
    """Render ``value`` for the slot held by ``node``.

    Quoted scalars keep their quoting. Text that would read back as another type
    than the slot's tag is double-quoted, and so is a non-string value written
    into a string slot. Anything that cannot be written plain at that position
    is double-quoted as well.
    """

    represented = _represent(value)
    text = represented.value
    analysis = Emitter(io.StringIO(), allow_unicode=True).analyze_scalar(text)
    if node.style in _QUOTED_STYLES:
        if node.style == "'" and (analysis.multiline or not analysis.allow_single_quoted):
            return _quote(text, '"')
        return _quote(text, node.style)
    resolved = _RESOLVER.resolve(yaml.ScalarNode, text, (True, False))
    if isinstance(value, str):
        if resolved not in (STR_TAG, node.tag):
            return _quote(text, '"')
    elif node.tag == STR_TAG and resolved != STR_TAG:
        return _quote(text, '"')
    elif resolved != represented.tag:
        raise config_error(
            ErrorKind.INVALID_VALUE,
            f"{text!r} would read back as {resolved}, not {represented.tag}",
            value=repr(value),
        )
    plain = analysis.allow_flow_plain if node.flow else analysis.allow_block_plain
    if plain and not analysis.multiline:
        return text
    return _quote(text, '"')


class Document:
    """Source text plus the node tree composed from it."""

    def __init__(self, text: str) -> None:
        self._root, self._explicit_start = _compose(text)
        self._text = text
        self._modified = False

    @classmethod
    def parse(cls, payload: bytes | str) -> "Document":
        if not payload:
            raise config_error(ErrorKind.EMPTY_PAYLOAD, "empty configuration")
        if isinstance(payload, bytes):
            try:
                text = payload.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise config_error(ErrorKind.PARSE_ERROR, f"failed to parse configuration: {exc}") from exc
        else:
            text = payload
        return cls(text)

    @property
    def root(self) -> Node | None:
        return self._root

    @property
    def text(self) -> str:
        return self._text

    @property
    def modified(self) -> bool:
        return self._modified

    def to_python(self, node: Node | None = None) -> Any:
        """Construct plain Python data for ``node`` (the whole document by default)."""

        target = self._root if node is None else node
        if target is None:
            return None
        loader = yaml.SafeLoader("")
        try:
            return loader.construct_document(target.source)
        except yaml.YAMLError as exc:
            raise config_error(ErrorKind.DECODE_ERROR, f"failed to decode configuration: {exc}") from exc
        finally:
            loader.dispose()

    def replace_scalar(self, node: ScalarNode, value: Any) -> None:
        """Overwrite the lexical value of ``node`` and recompose the tree.

        Node references taken before the call are stale afterwards.
        """

        span = self._text[node.start : node.end]
        match = _NODE_PROPERTIES.match(span)
        prefix = match.group(0) if match else ""
        tail = _TRAILING_SPACE.search(span).group(0) if node.style in _BLOCK_STYLES else ""
        rendered = render_scalar(node, value)
        if (prefix and not prefix[-1].isspace()) or (not prefix and node.start == node.end):
            rendered = " " + rendered
        text = self._text[: node.start] + prefix + rendered + tail + self._text[node.end :]
        self._root, self._explicit_start = _compose(text)
        self._text = text
        self._modified = True

    def serialize(self) -> bytes:
        """Document text as UTF-8, always starting with a ``---`` marker.

        Only sources that already carry an explicit ``---`` round-trip byte for byte.
        """

        if self._root is None:
            raise config_error(ErrorKind.EMPTY_PAYLOAD, "invalid configuration format: content is nil or empty")
        text = self._text if self._explicit_start else DOCUMENT_MARKER + self._text
        return text.encode("utf-8")
