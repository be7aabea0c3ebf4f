from __future__ import annotations

import argparse
from pathlib import Path

from ...cli.output import build_base_payload, emit
from ...config import Config, DirectorySource, Product, flatten, parse_overrides
from ...config.source import DEFAULT_RELATIVE_CONFIG_PATH
from ...core.context import RunContext
from ...core.logging import log_event
from ...errors import ScriptError
from ...exit_codes import ERR_USAGE, OK


def _load(ctx: RunContext, ns: argparse.Namespace) -> Config:
    if ns.config:
        path = Path(ns.config)
        config = Config.from_file(DirectorySource(path.parent), path.name)
        origin = str(path)
    else:
        config = Config.default()
        origin = DEFAULT_RELATIVE_CONFIG_PATH
    log_event(ctx, "info", "config", "load", source=origin, products=len(config.spec.products))
    return config


def _apply_overrides(ctx: RunContext, config: Config, tokens: list[str] | None) -> None:
    if not tokens:
        return
    tree = parse_overrides(tokens)
    config.apply_overrides(tree)
    for target in tree:
        log_event(ctx, "debug", "config", "override", target=target)
    log_event(ctx, "info", "config", "overrides_applied", count=len(tokens))


def _product_payload(product: Product) -> dict[str, object]:
    return {
        "name": product.name,
        "key": product.key_name(),
        "enabled": product.enabled,
        "namespace": product.get_namespace(),
        "properties": product.properties,
    }


def _write(ctx: RunContext, config: Config, ns: argparse.Namespace) -> None:
    target = ns.out or (ns.config if ns.write else None)
    if ns.write and not ns.config:
        raise ScriptError("--write requires --config: the bundled configuration is read-only", ERR_USAGE)
    if target is None:
        print(str(config), end="")
        return
    Path(target).write_bytes(config.serialize())
    log_event(ctx, "info", "config", "write", path=target)


def run_config_command(ctx: RunContext, ns: argparse.Namespace) -> int:
    as_json = ctx.output_format == "json" or bool(getattr(ns, "json", False))
    if ns.config_cmd == "overrides":
        tree = parse_overrides(ns.set or [])
        payload = {**build_base_payload(ctx), "overrides": tree}
        if ns.flat:
            paths, values = flatten(tree)
            payload["paths"] = [{"path": path, "value": value} for path, value in zip(paths, values)]
        emit(payload, as_json)
        return OK
    config = _load(ctx, ns)
    _apply_overrides(ctx, config, getattr(ns, "set", None))
    if ns.config_cmd == "view":
        print(str(config), end="")
        return OK
    if ns.config_cmd == "validate":
        config.validate()
        emit(
            {
                **build_base_payload(ctx),
                "namespace": config.spec.namespace,
                "products": len(config.spec.products),
                "enabled": [p.name for p in config.get_enabled_products()],
            },
            as_json,
        )
        return OK
    if ns.config_cmd == "products":
        products = config.get_enabled_products() if ns.enabled else config.spec.products
        emit({**build_base_payload(ctx), "products": [_product_payload(p) for p in products]}, as_json)
        return OK
    if ns.config_cmd == "product":
        emit({**build_base_payload(ctx), "product": _product_payload(config.get_product(ns.name))}, as_json)
        return OK
    if ns.config_cmd == "set":
        _write(ctx, config, ns)
        return OK
    return ERR_USAGE


def _add_source_args(parser: argparse.ArgumentParser, *, require_set: bool = False) -> None:
    parser.add_argument("--config", help=f"configuration file (default: {DEFAULT_RELATIVE_CONFIG_PATH})")
    parser.add_argument(
        "--set",
        action="append",
        metavar="KEY=VALUE",
        required=require_set,
        help="override a setting (`key=value`) or product field (`Product[Name].field=value`)",
    )


def configure_config_parser(sub: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    p = sub.add_parser("config", help="installer configuration commands")
    p.add_argument("--json", action="store_true", help="emit machine-readable JSON output")
    cfg = p.add_subparsers(dest="config_cmd", required=True)

    c_view = cfg.add_parser("view", help="print the configuration document")
    _add_source_args(c_view)

    c_validate = cfg.add_parser("validate", help="validate the configuration document")
    _add_source_args(c_validate)

    c_products = cfg.add_parser("products", help="list configured products")
    _add_source_args(c_products)
    c_products.add_argument("--enabled", action="store_true", help="only list enabled products")

    c_product = cfg.add_parser("product", help="show one product by name")
    c_product.add_argument("name")
    _add_source_args(c_product)

    c_overrides = cfg.add_parser("overrides", help="print the override tree parsed from --set values")
    c_overrides.add_argument("--set", action="append", metavar="KEY=VALUE", required=True)
    c_overrides.add_argument("--flat", action="store_true", help="include flattened key paths")

    c_set = cfg.add_parser("set", help="apply --set overrides and write the updated document")
    _add_source_args(c_set, require_set=True)
    out = c_set.add_mutually_exclusive_group()
    out.add_argument("--out", help="write the updated document to this path")
    out.add_argument("--write", action="store_true", help="write the updated document back to --config")
