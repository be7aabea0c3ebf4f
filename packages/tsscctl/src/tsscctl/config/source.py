"""Byte sources the configuration is read from.

The default installer configuration ships inside the package under
``installer/config.yaml``. A directory source layered over it lets a local
``installer/config.yaml`` in the working directory take precedence.
"""

from __future__ import annotations

from importlib import resources
from pathlib import Path
from typing import Protocol

from .errors import ConfigError, ErrorKind, config_error

DEFAULT_FILENAME = "config.yaml"
DEFAULT_RELATIVE_CONFIG_PATH = f"installer/{DEFAULT_FILENAME}"


class ByteSource(Protocol):
    def read_file(self, path: str) -> bytes: ...


class DirectorySource:
    def __init__(self, root: Path) -> None:
        self.root = root

    def read_file(self, path: str) -> bytes:
        target = self.root / path
        try:
            return target.read_bytes()
        except OSError as exc:
            raise config_error(
                ErrorKind.SOURCE_UNAVAILABLE,
                f"unable to read configuration {target}: {exc.strerror or exc}",
                path=str(target),
            ) from exc


class BundledSource:
    """Files packaged with tsscctl."""

    def read_file(self, path: str) -> bytes:
        target = resources.files("tsscctl")
        for part in Path(path).parts:
            target = target.joinpath(part)
        if not target.is_file():
            raise config_error(
                ErrorKind.SOURCE_UNAVAILABLE,
                f"bundled configuration {path} not found",
                path=path,
            )
        return target.read_bytes()


class LayeredSource:
    """First source that holds the requested file wins."""

    def __init__(self, *sources: ByteSource) -> None:
        self.sources = sources

    def read_file(self, path: str) -> bytes:
        for source in self.sources:
            try:
                return source.read_file(path)
            except ConfigError as exc:
                if exc.kind is not ErrorKind.SOURCE_UNAVAILABLE:
                    raise
        raise config_error(ErrorKind.SOURCE_UNAVAILABLE, f"configuration {path} not found in any source", path=path)


def default_source(cwd: Path | None = None) -> LayeredSource:
    return LayeredSource(DirectorySource(cwd or Path.cwd()), BundledSource())
