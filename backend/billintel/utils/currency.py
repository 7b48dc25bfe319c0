"""Kenyan Shilling (KES) formatting helpers for templated narratives."""
import re

CURRENCY_SYMBOL = "KSH"
CURRENCY_CODE = "KES"

_STRIP_CHARS = re.compile(r"[KSH\s,]")
_NUMBER_PREFIX = re.compile(r"^[-+]?(\d+\.?\d*|\.\d+)")


def format_currency(amount: float) -> str:
    """Format with thousands separators and at most two decimals, e.g. ``KSH 1,234.5``."""
    text = f"{abs(amount):,.2f}".rstrip("0").rstrip(".")
    sign = "-" if amount < 0 and text != "0" else ""
    return f"{sign}{CURRENCY_SYMBOL} {text}"


def format_currency_compact(amount: float) -> str:
    if amount >= 1_000_000:
        return f"{CURRENCY_SYMBOL} {amount / 1_000_000:.1f}M"
    if amount >= 1_000:
        return f"{CURRENCY_SYMBOL} {amount / 1_000:.1f}K"
    return f"{CURRENCY_SYMBOL} {amount:.0f}"


def parse_currency(value: str) -> float:
    cleaned = _STRIP_CHARS.sub("", value or "")
    match = _NUMBER_PREFIX.match(cleaned)
    if not match:
        return 0.0
    return float(match.group(0))
