"""Tsscctl core package."""
from .clock import utc_now_iso
from .context import RunContext
from .logging import log_event
from .serialize import dumps_json

__all__ = [
    "RunContext",
    "utc_now_iso",
    "dumps_json",
    "log_event",
]
