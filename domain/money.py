from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Dict, Optional, Tuple

DEFAULT_LOCALE = "zh-CN"

# locale -> (group separator, decimal separator)
LOCALE_SEPARATORS: Dict[str, Tuple[str, str]] = {
    "zh-CN": (",", "."),
    "en-US": (",", "."),
    "de-DE": (".", ","),
    "fr-FR": ("\u202f", ","),
}

_STRIP_RE = re.compile(r"[^\d.]")
_LEADING_NUMBER_RE = re.compile(r"\d+\.?\d*|\.\d+")
_NEGATIVE_RE = re.compile(r"^[^\d]*-")


def parse_to_cents(text: str) -> Optional[int]:
    """
    Parse a user-typed amount into integer cents.

    Everything except digits and dots is ignored, so "¥1,500.50" gives
    150050. Only the leading decimal literal counts ("1.2.3" reads as
    1.2). Returns None for empty, zero or negative input; a minus sign
    before the first digit marks the input as negative.
    """

    if not text or _NEGATIVE_RE.match(text):
        return None

    cleaned = _STRIP_RE.sub("", text)
    match = _LEADING_NUMBER_RE.match(cleaned)
    if not match:
        return None

    literal = match.group(0)
    try:
        # Enough precision for every digit of the input plus the two cent places.
        with localcontext() as ctx:
            ctx.prec = max(ctx.prec, len(literal) + 3)
            value = Decimal(literal)
            if not value.is_finite() or value <= 0:
                return None
            cents = int(value.scaleb(2).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        return None

    if cents <= 0:
        return None
    return cents


def _separators(locale: str) -> Tuple[str, str]:
    return LOCALE_SEPARATORS.get(locale, LOCALE_SEPARATORS[DEFAULT_LOCALE])


def format_amount(cents: int, locale: str = DEFAULT_LOCALE) -> str:
    """
    Render cents as a grouped decimal string without currency symbol.

    Whole amounts drop the fraction ("1,500"); anything else always shows
    two decimals ("1,500.50").
    """

    group, decimal_point = _separators(locale)
    whole, fraction = divmod(abs(cents), 100)

    rendered = f"{whole:,}".replace(",", group)
    if fraction:
        rendered = f"{rendered}{decimal_point}{fraction:02d}"
    if cents < 0:
        rendered = f"-{rendered}"
    return rendered


def format_balance(cents: int, locale: str = DEFAULT_LOCALE) -> str:
    """Like `format_amount` but with an explicit "+" or "-"; zero has no sign."""

    formatted = format_amount(abs(cents), locale)
    if cents > 0:
        return f"+{formatted}"
    if cents < 0:
        return f"-{formatted}"
    return formatted
