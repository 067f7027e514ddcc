import math
from typing import Any


def to_float(value: Any, default: float = 0.0) -> float:
    """Coerce form text or numbers to a finite float; anything else becomes ``default``."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(numeric):
        return default
    return numeric


def safe_pow(base: float, exponent: int) -> float:
    """``base ** exponent`` for integer exponents, saturating to a signed infinity on overflow."""
    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0 and exponent % 2 == 1:
            return -math.inf
        return math.inf


def safe_divide(numerator: float, denominator: float) -> float:
    """Division that gives a signed infinity for a zero denominator, and 0 for 0/0."""
    if denominator == 0:
        if numerator == 0:
            return 0.0
        return math.copysign(math.inf, numerator)
    return numerator / denominator
