from __future__ import annotations

import math

MAX_CENTURY = 30
DIRECT_CENTURY_RANGE = (1, MAX_CENTURY)
AH_YEAR_RANGE = (50, 2000)


def century_from_year(year: float) -> int:
    """Century AH containing an AH year (year 100 is the last year of century 1)."""
    return math.floor((year - 1) / 100) + 1


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def resolve_century(value: float | None) -> int | None:
    """Interpret a numeric era marker as a century AH.

    Small values are already centuries; values in the AH-year range are
    converted. Anything strictly between the two ranges (31-49) is rejected.
    """
    if value is None or not math.isfinite(value):
        return None

    low, high = DIRECT_CENTURY_RANGE
    if low <= value <= high:
        return _round_half_up(value)

    year_low, year_high = AH_YEAR_RANGE
    if year_low <= value <= year_high:
        century = century_from_year(value)
        if 1 <= century <= MAX_CENTURY:
            return century
    return None
