"""Operand parsing and canonical number-to-text conversion.

Results are shown with the shortest digit string that round-trips to the
same binary float.  Integral values carry no fractional part, and the
exponent form only kicks in for very large or very small magnitudes:

    7.0            -> "7"
    0.1 + 0.2      -> "0.30000000000000004"
    1e21           -> "1e+21"
    1.5e-7         -> "1.5e-7"
"""
from __future__ import annotations

import math
from decimal import Decimal

# Positional notation is used for magnitudes 10**(EXP_LO) <= |x| < 10**(EXP_HI).
EXP_LO = -6
EXP_HI = 21


def parse_operand(text: str) -> float | None:
    """Parse an entry buffer, or return None when it is not a number."""
    try:
        value = float(text)
    except ValueError:
        return None
    if math.isnan(value):
        return None
    return value


def _shortest_digits(value: float) -> tuple[str, int]:
    """Return (digits, point) with value == 0.digits * 10**point.

    ``value`` must be positive and finite.  ``repr`` already yields the
    shortest round-tripping text; Decimal splits it into digits and
    exponent without introducing binary noise.
    """
    sign, digit_tuple, exponent = Decimal(repr(value)).normalize().as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    return digits, len(digits) + exponent


def format_number(value: float) -> str:
    """Render a computed result as display text."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"          # covers -0.0

    sign = "-" if value < 0 else ""
    digits, point = _shortest_digits(abs(value))
    k = len(digits)

    if k <= point <= EXP_HI:
        return sign + digits + "0" * (point - k)
    if 0 < point <= EXP_HI:
        return sign + digits[:point] + "." + digits[point:]
    if EXP_LO < point <= 0:
        return sign + "0." + "0" * -point + digits

    exp = point - 1
    mantissa = digits[0] if k == 1 else digits[0] + "." + digits[1:]
    exp_sign = "+" if exp >= 0 else "-"
    return f"{sign}{mantissa}e{exp_sign}{abs(exp)}"
