from __future__ import annotations

from typing import Any, List, Sequence

from rich.table import Table

from ..pricing.result import ChargeLine, PriceResult, Suggestion
from .format import format_currency


def _md_escape(v: Any) -> str:
    s = "" if v is None else str(v)
    # Escape pipes so Markdown tables don't break
    return s.replace("|", "\\|").replace("\n", " ").strip()


def _opt(v: Any) -> str:
    return "-" if v is None else str(v)


def render_lines_table(lines: Sequence[ChargeLine], currency: str) -> str:
    rows: List[str] = [
        "| Type | Description | Minutes | Fractions | Amount |",
        "|---|---|---|---|---|",
    ]
    for line in lines:
        rows.append(
            "| {t} | {d} | {m} | {f} | {a} |".format(
                t=_md_escape(line.type),
                d=_md_escape(line.description),
                m=_opt(line.minutes),
                f=_opt(line.fractions if line.fractions is not None else line.days),
                a=format_currency(line.amount, currency),
            )
        )
    return "\n".join(rows)


def render_suggestions_table(suggestions: Sequence[Suggestion], currency: str) -> str:
    rows: List[str] = [
        "| Rate | Type | Threshold | Alternative | Current | Savings | Auto-apply |",
        "|---|---|---|---|---|---|---|",
    ]
    for s in suggestions:
        rows.append(
            "| {r} | {t} | {th} | {tp} | {cp} | {sv} | {aa} |".format(
                r=_md_escape(s.rate_id),
                t=s.rate_type.value,
                th=format_currency(s.threshold_amount, currency),
                tp=format_currency(s.target_price, currency),
                cp=format_currency(s.current_price, currency),
                sv=format_currency(s.savings, currency),
                aa="yes" if s.auto_apply else "no",
            )
        )
    return "\n".join(rows)


def build_console_table(result: PriceResult, currency: str) -> Table:
    """Breakdown + extras as a rich table, total in the footer."""
    table = Table(title=f"Rate {result.applied_rate.id} ({result.applied_rate.type.value})", show_footer=True)
    table.add_column("Type", footer="Total")
    table.add_column("Description")
    table.add_column("Minutes", justify="right")
    table.add_column("Fractions", justify="right")
    table.add_column("Amount", justify="right", footer=format_currency(result.price, currency))

    for line in list(result.breakdown) + list(result.extras):
        table.add_row(
            line.type,
            line.description,
            _opt(line.minutes),
            _opt(line.fractions if line.fractions is not None else line.days),
            format_currency(line.amount, currency),
        )
    return table


__all__ = ["render_lines_table", "render_suggestions_table", "build_console_table"]
