from __future__ import annotations

import re
from enum import Enum
from typing import Mapping


class GenreCode(str, Enum):
    BIO = "BIO"
    DEV = "DEV"
    PHI = "PHI"
    POE = "POE"
    RHE = "RHE"
    THE = "THE"


GENRE_ORDER: tuple[GenreCode, ...] = (
    GenreCode.BIO,
    GenreCode.DEV,
    GenreCode.PHI,
    GenreCode.POE,
    GenreCode.RHE,
    GenreCode.THE,
)

TOKEN_SPLIT_RE = re.compile(r"[^A-Z0-9]+")


def resolve_genre(raw: object, letter_codes: Mapping[str, str]) -> GenreCode | None:
    """Map a raw genre cell onto one of the six codes.

    Whole-value code match wins over the single-letter map, which wins over
    prefix/token matching inside labels such as "POE - Poetic (verse)".
    """
    if raw is None:
        return None
    value = str(raw).strip()
    if not value:
        return None

    upper = value.upper()
    for code in GENRE_ORDER:
        if upper == code.value:
            return code

    mapped = letter_codes.get(value.lower())
    if mapped is not None:
        return GenreCode(mapped)

    tokens = set(TOKEN_SPLIT_RE.split(upper))
    for code in GENRE_ORDER:
        if upper.startswith(code.value) or code.value in tokens:
            return code
    return None
