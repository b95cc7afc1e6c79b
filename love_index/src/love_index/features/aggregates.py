from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Sequence

import pandas as pd

from love_index.config import PolicyConfig
from love_index.pipeline.build_records import CanonicalRecord
from love_index.preprocess.genre import GENRE_ORDER, GenreCode

RECORD_COLUMNS = [
    "genre",
    "century",
    "year_approx",
    "love_index",
    "title",
    "author",
    "identifier",
]


@dataclass(frozen=True)
class AggregateBucket:
    century: int
    mean: float
    n: int


@dataclass(frozen=True)
class Spotlights:
    top: tuple[CanonicalRecord, ...]
    bottom: tuple[CanonicalRecord, ...]


def records_to_frame(records: Sequence[CanonicalRecord]) -> pd.DataFrame:
    if not records:
        return pd.DataFrame(columns=RECORD_COLUMNS)
    frame = pd.DataFrame([asdict(record) for record in records], columns=RECORD_COLUMNS)
    frame["genre"] = frame["genre"].map(lambda code: GenreCode(code).value)
    frame["century"] = frame["century"].astype(int)
    frame["love_index"] = frame["love_index"].astype(float)
    return frame


def _bucketize(frame: pd.DataFrame) -> tuple[AggregateBucket, ...]:
    if frame.empty:
        return ()
    # fsum is exactly rounded, so means do not depend on row order.
    grouped = (
        frame.groupby("century", dropna=True)
        .agg(
            total=("love_index", lambda s: math.fsum(s)),
            n=("love_index", "count"),
        )
        .sort_index()
    )
    return tuple(
        AggregateBucket(century=int(century), mean=float(total) / int(n), n=int(n))
        for century, total, n in grouped.itertuples()
        if int(n) > 0
    )


def build_pooled_series(records: Sequence[CanonicalRecord]) -> tuple[AggregateBucket, ...]:
    return _bucketize(records_to_frame(records))


def build_genre_series(
    records: Sequence[CanonicalRecord],
) -> dict[GenreCode, tuple[AggregateBucket, ...]]:
    frame = records_to_frame(records)
    return {
        genre: _bucketize(frame[frame["genre"] == genre.value]) for genre in GENRE_ORDER
    }


def build_genre_counts(records: Sequence[CanonicalRecord]) -> dict[GenreCode, int]:
    frame = records_to_frame(records)
    counts = (
        frame["genre"]
        .value_counts()
        .reindex([genre.value for genre in GENRE_ORDER], fill_value=0)
    )
    return {GenreCode(genre): int(count) for genre, count in counts.items()}


def build_century_genre_counts(
    records: Sequence[CanonicalRecord],
    policy: PolicyConfig,
) -> pd.DataFrame:
    """Zero-filled text counts per century (rows) and genre (columns) over the window."""
    frame = records_to_frame(records)
    genre_columns = [genre.value for genre in GENRE_ORDER]
    counts = (
        frame.groupby(["century", "genre"]).size().unstack("genre")
        if not frame.empty
        else pd.DataFrame(columns=genre_columns)
    )
    counts = counts.reindex(index=policy.centuries, columns=genre_columns, fill_value=0)
    counts = counts.fillna(0).astype(int)
    counts.index.name = "century"
    counts.columns.name = None
    return counts.reset_index()


def build_spotlights(records: Sequence[CanonicalRecord], top_n: int = 5) -> Spotlights:
    """Highest and lowest scoring texts; ties fall back to bibliographic order."""

    def _tiebreak(record: CanonicalRecord) -> tuple[str, str, str]:
        return (record.title, record.author, record.identifier)

    top = sorted(records, key=lambda record: (-record.love_index, *_tiebreak(record)))
    bottom = sorted(records, key=lambda record: (record.love_index, *_tiebreak(record)))
    return Spotlights(top=tuple(top[:top_n]), bottom=tuple(bottom[:top_n]))
