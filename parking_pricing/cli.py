#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Parking pricing – CLI

Flow:
- Opens the rate configuration store (local YAML/JSON fixture or REST endpoint).
- Loads the rate chosen by the operator.
- Prices the stay with calculate_advanced_price (thresholds + auto-apply included).
- Prints a receipt-style table and optionally writes Markdown / JSON output.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import yaml
from rich.console import Console

from .config import CURRENCY, LOG_LEVEL, STORE_FILE, STORE_URL, TRACE_FILE
from .errors import PricingError
from .pricing.engine import PricingOptions, calculate_advanced_price
from .pricing.result import PriceResult
from .pricing.types import Ticket
from .reporting.format import format_currency, render_price_report
from .reporting.tables import build_console_table
from .store import HttpRateStore, load_store_file
from .utils.trace import build_pricing_trace

console = Console()
_LOGGER = logging.getLogger("parking_pricing")


# --------------------------------------------------------------------
# Argument parsing
# --------------------------------------------------------------------
def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="parking-price",
        description=(
            "Parking fee calculator\n\n"
            "Prices one stay against a configured rate:\n"
            "- hourly fractions with courtesy minutes\n"
            "- daily / overnight windows with overtime billed hourly\n"
            "- weekly / biweekly allowances, flat monthly plans\n"
            "- threshold suggestions and optional auto-upgrade to a cheaper rate\n"
        ),
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--store-file",
        type=str,
        default=STORE_FILE or None,
        help="YAML/JSON file with rates, time_windows, thresholds, pricing_rules.",
    )
    source.add_argument(
        "--store-url",
        type=str,
        default=None,
        help="PostgREST base URL of the rate tables (default: PARKING_STORE_URL).",
    )

    parser.add_argument("--rate-id", required=True, help="Rate to price the stay with.")
    parser.add_argument("--vehicle-type", default="", help="Vehicle type of the ticket (e.g. Carro).")
    parser.add_argument("--entry-date", required=True, help="Entry date, YYYY-MM-DD.")
    parser.add_argument("--entry-time", default=None, help="Entry time, HH:MM[:SS] (default 00:00).")
    parser.add_argument("--exit-date", required=True, help="Exit date, YYYY-MM-DD.")
    parser.add_argument("--exit-time", default=None, help="Exit time, HH:MM[:SS] (default 00:00).")

    parser.add_argument(
        "--courtesy-minutes",
        type=int,
        default=None,
        help="Override the courtesy allowance of an hourly rate.",
    )
    parser.add_argument(
        "--no-auto-apply",
        action="store_true",
        help="Report threshold suggestions but never switch the billed rate.",
    )
    parser.add_argument("--currency", default=CURRENCY, help="Currency used for rendering.")

    parser.add_argument(
        "--output-format",
        choices=["markdown", "json", "both"],
        default=None,
        help="Also write the result to --output-prefix.md / .json.",
    )
    parser.add_argument("--output-prefix", default="parking_price", help="Prefix of written files.")

    parser.add_argument(
        "--log-level",
        choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"],
        default=LOG_LEVEL.upper(),
        help="Logging level for internal messages.",
    )
    parser.add_argument(
        "--trace-path",
        type=str,
        default=TRACE_FILE or None,
        help="Append a JSONL trace of the calculation phases to this file.",
    )

    return parser.parse_args(argv)


# --------------------------------------------------------------------
# Helpers
# --------------------------------------------------------------------
def _open_store(args: argparse.Namespace):
    if args.store_file:
        return load_store_file(args.store_file)
    url = args.store_url or STORE_URL
    if not url:
        raise SystemExit("No rate store configured: pass --store-file or --store-url (or PARKING_STORE_URL).")
    return HttpRateStore(base_url=url)


async def _run(args: argparse.Namespace) -> Optional[PriceResult]:
    store = _open_store(args)
    trace = build_pricing_trace(args.trace_path) if args.trace_path else None
    try:
        rate = await store.get_rate(args.rate_id)
        if rate is None:
            console.print(f"[red]Unknown rate id: {args.rate_id}[/red]")
            return None
        ticket = Ticket(
            vehicle_type=args.vehicle_type or rate.vehicle_type,
            entry_date=args.entry_date,
            entry_time=args.entry_time,
        )
        options = PricingOptions(courtesy_minutes=args.courtesy_minutes, auto_apply=not args.no_auto_apply)
        return await calculate_advanced_price(
            ticket, rate, args.exit_date, args.exit_time, options, store=store, trace=trace
        )
    finally:
        if isinstance(store, HttpRateStore):
            await store.aclose()


def _write_outputs(result: PriceResult, args: argparse.Namespace) -> None:
    if args.output_format in ("markdown", "both"):
        md_path = Path(f"{args.output_prefix}.md")
        md_path.write_text(render_price_report(result, args.currency), encoding="utf-8")
        _LOGGER.info("Saved Markdown report to %s", md_path)
    if args.output_format in ("json", "both"):
        json_path = Path(f"{args.output_prefix}.json")
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)
        _LOGGER.info("Saved JSON result to %s", json_path)


# --------------------------------------------------------------------
# Main
# --------------------------------------------------------------------
def main(argv: Optional[list] = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )
    _LOGGER.debug("CLI arguments: %s", args)

    try:
        result = asyncio.run(_run(args))
    except (PricingError, ValueError, OSError, yaml.YAMLError) as ex:
        _LOGGER.error("Pricing failed: %s", ex)
        console.print(f"[red]Pricing failed: {ex}[/red]")
        return 1

    if result is None:
        return 1

    console.print(build_console_table(result, args.currency))
    if result.auto_applied:
        console.print(
            f"[green]Auto-applied {result.auto_applied.to_rate_id} "
            f"(was {format_currency(result.base_calculation.total, args.currency)})[/green]"
        )
    for s in result.suggestions:
        if s.savings > 0 and not (result.auto_applied and result.auto_applied.to_rate_id == s.rate_id):
            console.print(
                f"[yellow]Rate {s.rate_id} ({s.rate_type.value}) would cost "
                f"{format_currency(s.target_price, args.currency)}, saving "
                f"{format_currency(s.savings, args.currency)}[/yellow]"
            )

    if args.output_format:
        _write_outputs(result, args)
    return 0


if __name__ == "__main__":
    sys.exit(main())
