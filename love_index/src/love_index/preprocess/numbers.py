from __future__ import annotations

import math
import re

CLEAN_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")
EMBEDDED_NUMBER_RE = re.compile(r"[+-]?\d+(?:\.\d+)?")


def coerce_number(raw: object) -> float | None:
    """Parse a loosely formatted numeric cell.

    Accepts a decimal comma ("1,25") and falls back to the first embedded
    number for values such as "400 AH" or "350/961". Returns None when the
    cell holds no number at all.
    """
    if raw is None:
        return None
    text = str(raw).strip().replace(",", ".", 1)
    if not text:
        return None

    if CLEAN_NUMBER_RE.match(text):
        value = float(text)
        if math.isfinite(value):
            return value

    match = EMBEDDED_NUMBER_RE.search(text)
    if match is None:
        return None
    value = float(match.group(0))
    return value if math.isfinite(value) else None
