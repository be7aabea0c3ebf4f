from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScriptError(Exception):
    """Failure reported to the caller with a process exit code."""

    message: str
    code: int
    kind: str = "generic_error"

    def __str__(self) -> str:
        return self.message

    def kind_name(self) -> str:
        return str(getattr(self.kind, "value", self.kind))
