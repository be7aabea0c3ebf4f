from __future__ import annotations

import argparse
import os
import platform
import sys

from .. import __version__
from ..commands.config import configure_config_parser, run_config_command
from ..core.context import RunContext
from ..core.logging import log_event
from ..errors import ScriptError
from ..exit_codes import ERR_INTERNAL, ERR_USAGE, OK
from .output import build_base_payload, emit, render_error, resolve_output_format


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="tsscctl")
    p.add_argument("--version", action="version", version=f"tsscctl {__version__}")
    p.add_argument("--json", action="store_true", help="emit JSON output")
    p.add_argument("--format", choices=["text", "json"], default=None, help="output format")
    p.add_argument("--run-id", help="run identifier for log events")
    p.add_argument("--profile", help="profile id")
    p.add_argument("--log-json", action="store_true", help="emit log events as JSON lines on stderr")
    vg = p.add_mutually_exclusive_group()
    vg.add_argument("--verbose", action="store_true", help="enable verbose diagnostics")
    vg.add_argument("--quiet", action="store_true", help="only emit errors")
    sub = p.add_subparsers(dest="cmd", required=True)

    version_p = sub.add_parser("version", help="print tool and runtime versions")
    version_p.add_argument("--json", action="store_true", help="emit JSON output")
    configure_config_parser(sub)
    return p


def main(argv: list[str] | None = None) -> int:
    raw_argv = argv if argv is not None else sys.argv[1:]
    p = build_parser()
    ns = p.parse_args(raw_argv)
    if ns.format and "--json" in raw_argv and ns.format != "json":
        print(
            render_error(as_json=True, message="conflicting output flags: use either --format json or --json", code=ERR_USAGE),
            file=sys.stderr,
        )
        return ERR_USAGE
    fmt = resolve_output_format(cli_json=("--json" in raw_argv), cli_format=ns.format, ci_present=bool(os.environ.get("CI")))
    ctx = RunContext.from_args(ns.run_id, ns.profile, fmt, ns.verbose, ns.quiet, ns.log_json)
    try:
        log_event(ctx, "debug", "cli", "start", cmd=ns.cmd, fmt=ctx.output_format)
        as_json = ctx.output_format == "json"
        if ns.cmd == "version":
            emit(
                {
                    **build_base_payload(ctx),
                    "tsscctl_version": __version__,
                    "python_version": platform.python_version(),
                },
                as_json,
            )
            return OK
        if ns.cmd == "config":
            return run_config_command(ctx, ns)
        return ERR_USAGE
    except ScriptError as exc:
        log_event(ctx, "error", "cli", "failed", cmd=ns.cmd, kind=exc.kind_name())
        print(
            render_error(as_json=(ctx.output_format == "json"), message=str(exc), code=exc.code, kind=exc.kind_name()),
            file=sys.stderr,
        )
        return exc.code
    except Exception as exc:  # pragma: no cover
        print(
            render_error(as_json=(ctx.output_format == "json"), message=f"internal error: {exc}", code=ERR_INTERNAL),
            file=sys.stderr,
        )
        return ERR_INTERNAL


if __name__ == "__main__":
    raise SystemExit(main())
