from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal

OutputFormat = Literal["text", "json"]


@dataclass(frozen=True)
class RunContext:
    run_id: str
    profile: str
    output_format: OutputFormat
    verbose: bool
    quiet: bool
    log_json: bool

    @classmethod
    def from_args(
        cls,
        run_id: str | None,
        profile: str | None,
        output_format: OutputFormat = "text",
        verbose: bool = False,
        quiet: bool = False,
        log_json: bool = False,
    ) -> "RunContext":
        default_run = f"tssc-{datetime.now(timezone.utc).strftime('%Y%m%d-%H%M%S')}"
        return cls(
            run_id=run_id or os.environ.get("RUN_ID", default_run),
            profile=profile or os.environ.get("PROFILE", "local"),
            output_format=output_format,
            verbose=verbose,
            quiet=quiet,
            log_json=log_json,
        )
