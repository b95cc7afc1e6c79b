from __future__ import annotations

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193
HASH_MASK = 0xFFFFFFFF
YEARS_PER_CENTURY = 100


def fnv1a_32(text: str) -> int:
    value = FNV_OFFSET_BASIS
    for byte in text.encode("utf-8"):
        value ^= byte
        value = (value * FNV_PRIME) & HASH_MASK
    return value


def position_seed(identifier: str, title: str, author: str) -> str:
    for candidate in (identifier, title, author):
        if candidate:
            return candidate
    return ""


def synthesize_year(century: int, seed: str) -> int:
    """Stable pseudo-year inside ``century`` for scatter placement.

    The result satisfies ``(century - 1) * 100 < year <= century * 100`` and
    depends only on the arguments.
    """
    # floor(hash / 2**32 * 100) without float rounding.
    offset = (fnv1a_32(seed) * YEARS_PER_CENTURY) >> 32
    return (century - 1) * YEARS_PER_CENTURY + offset + 1
