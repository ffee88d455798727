from decimal import Decimal
from typing import List

from ..pricing.result import Duration, PriceResult


def format_currency(value, currency: str) -> str:
    """BRL follows the Brazilian convention (R$ 1.234,56); others read 1,234.56 USD."""
    amount = Decimal(str(value))
    if (currency or "").upper() == "BRL":
        sign = "-" if amount < 0 else ""
        body = f"{abs(amount):,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
        return f"{sign}R$ {body}"
    return f"{amount:,.2f} {currency}"


def format_duration(duration: Duration) -> str:
    return f"{duration.hours}h{duration.minutes:02d}"


def render_summary_table(result: PriceResult, currency: str) -> str:
    auto = result.auto_applied
    rows = [
        "| Price | Applied rate | Duration | Base price | Auto-applied |",
        "|---|---|---|---|---|",
        "| {p} | {r} ({t}) | {d} | {b} | {a} |".format(
            p=format_currency(result.price, currency),
            r=result.applied_rate.id,
            t=result.applied_rate.type.value,
            d=format_duration(result.duration),
            b=format_currency(result.base_calculation.total, currency),
            a=f"{auto.from_rate_id} -> {auto.to_rate_id}" if auto else "-",
        ),
    ]
    return "\n".join(rows)


def render_price_report(result: PriceResult, currency: str) -> str:
    # tables imports this module
    from .tables import render_lines_table, render_suggestions_table

    sections: List[str] = ["## Summary", render_summary_table(result, currency), ""]
    sections.append("## Breakdown")
    sections.append(render_lines_table(result.breakdown, currency))
    sections.append("")

    if result.extras:
        sections.append("## Extras")
        sections.append(render_lines_table(result.extras, currency))
        sections.append("")

    if result.suggestions:
        sections.append("## Suggestions")
        sections.append(render_suggestions_table(result.suggestions, currency))
        sections.append("")

    return "\n".join(sections).strip()
