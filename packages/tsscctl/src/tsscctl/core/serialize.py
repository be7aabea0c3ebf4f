"""JSON rendering for command payloads."""

from __future__ import annotations

import json
from typing import Any


def dumps_json(payload: Any, pretty: bool = False) -> str:
    # Product properties may hold YAML timestamps or binary scalars.
    if pretty:
        return json.dumps(payload, indent=2, sort_keys=True, default=str)
    return json.dumps(payload, sort_keys=True, default=str)
