"""
Command line entry point.

    quoter check [--catalog PATH]
    quoter quote PRODUCT_ID [--set name=value ...] [--catalog PATH]
"""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, List, Optional, Sequence

import yaml

from quoter.catalog.loader import load_catalog
from quoter.controllers.quote_coordinator import QuoteCoordinator
from quoter.core.errors import ConfigurationError
from quoter.core.logging_config import get_logger, setup_logging

log = get_logger("quoter.cli")


def _parse_assignments(items: Sequence[str]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for item in items:
        name, sep, raw = item.partition("=")
        if not sep or not name:
            raise argparse.ArgumentTypeError(f"expected name=value, got {item!r}")
        # YAML scalars: 50 -> int, 2025-01-10 -> date, "ISO 9001" -> str
        values[name.strip()] = yaml.safe_load(raw) if raw else ""
    return values


async def _check(args: argparse.Namespace) -> int:
    coordinator = QuoteCoordinator()
    await coordinator.initialize(load_catalog(args.catalog))

    problems = await coordinator.engine.validate_all_rules()
    for p in problems:
        print(p)
    print(
        f"{len(coordinator.available_products)} active products, "
        f"{await coordinator.rule_store.count()} rules, {len(problems)} problems"
    )
    return 1 if problems else 0


async def _quote(args: argparse.Namespace) -> int:
    coordinator = QuoteCoordinator()
    await coordinator.initialize(load_catalog(args.catalog))

    product = next((p for p in coordinator.available_products if p.id == args.product_id), None)
    if product is None:
        print(f"Unknown or inactive product: {args.product_id}", file=sys.stderr)
        return 2

    await coordinator.select_product(product)
    form = coordinator.current_form_controller
    for name, value in _parse_assignments(args.set or []).items():
        await form.update_field(name, value)

    quote = await coordinator.create_quote()
    if quote is None:
        for error in form.all_errors:
            print(f"- {error}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(quote.to_map(), indent=2, ensure_ascii=False))
    else:
        print(quote.summary())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="quoter", description="Rule-driven quote engine")
    parser.add_argument("--log-level", default=None, help="Overrides QUOTER_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Load a catalog and report misconfigured rules")
    check.add_argument("--catalog", default=None, help="YAML catalog (bundled seed when omitted)")
    check.set_defaults(handler=_check)

    quote = sub.add_parser("quote", help="Price one product and print the quote")
    quote.add_argument("product_id")
    quote.add_argument("--set", action="append", metavar="NAME=VALUE", help="Form field value")
    quote.add_argument("--catalog", default=None, help="YAML catalog (bundled seed when omitted)")
    quote.add_argument("--json", action="store_true", help="Print the exported quote as JSON")
    quote.set_defaults(handler=_quote)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    # stdout carries the command output only
    setup_logging(level=args.log_level, stream=sys.stderr)

    try:
        return asyncio.run(args.handler(args))
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))
    except ConfigurationError as e:
        log.error("configuration_error", error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return 2
