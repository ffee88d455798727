# parking_pricing/pricing/normalize.py
import unicodedata
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable, Optional

CENT = Decimal("0.01")


def normalize_text(value: Any) -> str:
    """
    Case- and diacritic-insensitive form of a label.

    "Diária" -> "diaria", "Hora/Fração" -> "hora/fracao". None -> "".
    """
    if value is None:
        return ""
    decomposed = unicodedata.normalize("NFD", str(value))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.strip().lower()


def contains_any(normalized: str, tokens: Iterable[str]) -> bool:
    return any(tok in normalized for tok in tokens)


def to_money(value: Any, *, field: str = "value") -> Decimal:
    """Parse a stored money value (number or numeric string) into cents."""
    if value is None or value == "":
        return Decimal("0.00")
    if isinstance(value, Decimal):
        return value.quantize(CENT, rounding=ROUND_HALF_UP)
    # str() first so floats like 0.1 keep their printed value
    text = str(value).strip()
    if "," in text and "." not in text:
        text = text.replace(",", ".")
    try:
        return Decimal(text).quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        raise ValueError(f"Invalid money amount for '{field}': {value!r}")


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_optional_int(value: Any, *, field: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid integer for '{field}': {value!r}")
