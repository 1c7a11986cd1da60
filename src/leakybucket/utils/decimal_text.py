"""Decimal-string codec for drop counts.

Persisted bucket records store ``drops`` as a decimal *string* rather than
a JSON number.  Writing the float straight through ``json.dumps`` would emit
its shortest round-trip ``repr`` (``0.30000000000000004``), and other
readers of the same record may render it differently again.  The string is
cut to :data:`DROPS_PRECISION` significant digits and always written in
plain fixed-point notation.
"""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from typing import Any

DROPS_PRECISION: int = 14
"""Significant digits kept when a drop count is written out."""


def format_drops(drops: float) -> str:
    """Return *drops* as a fixed-point decimal string.

    Trailing zeros and a trailing decimal point are stripped, and the
    result never uses exponent notation.

    Raises
    ------
    ValueError
        If *drops* is NaN or infinite.

    Examples
    --------
    >>> format_drops(5.0)
    '5'
    >>> format_drops(1 / 3)
    '0.33333333333333'
    >>> format_drops(0.00001)
    '0.00001'
    """
    if not math.isfinite(drops):
        raise ValueError(f"drop count must be finite, got {drops!r}")

    text = format(Decimal(format(drops, f".{DROPS_PRECISION}g")), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("", "-0"):
        return "0"
    return text


def parse_drops(value: Any) -> float:
    """Convert a persisted drop count back to a float.

    Accepts the decimal string written by :func:`format_drops` as well as a
    native ``int`` or ``float`` (records written by other tools).

    Raises
    ------
    ValueError
        If *value* is not a finite decimal number.
    """
    if isinstance(value, bool):
        raise ValueError(f"drop count must be numeric, got {value!r}")
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(Decimal(value.strip()))
        except InvalidOperation:
            raise ValueError(f"drop count is not a decimal string: {value!r}") from None
    else:
        raise ValueError(f"drop count must be a decimal string, got {type(value).__name__}")

    if not math.isfinite(result):
        raise ValueError(f"drop count must be finite, got {value!r}")
    return result
