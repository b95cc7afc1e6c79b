from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Iterable, Mapping

from love_index.config import PolicyConfig
from love_index.errors import Diagnostic, InsufficientDataError
from love_index.io.schema import ColumnMap, RawRow
from love_index.preprocess.era import resolve_century
from love_index.preprocess.genre import GenreCode, resolve_genre
from love_index.preprocess.numbers import coerce_number
from love_index.preprocess.position import position_seed, synthesize_year

LOGGER = logging.getLogger(__name__)

SCORE_MIN = 0.0
SCORE_MAX = 2.0


@dataclass(frozen=True)
class CanonicalRecord:
    genre: GenreCode
    century: int
    year_approx: int
    love_index: float
    title: str
    author: str
    identifier: str


@dataclass(frozen=True)
class StageCounts:
    rows_total: int = 0
    with_genre: int = 0
    with_century: int = 0
    in_window: int = 0
    with_score: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class RecordBuildResult:
    records: tuple[CanonicalRecord, ...]
    stage_counts: StageCounts


def clamp_score(value: float) -> float:
    return min(SCORE_MAX, max(SCORE_MIN, value))


def _cell(row: RawRow, column: str | None) -> str:
    if column is None:
        return ""
    return str(row.get(column, "") or "").strip()


def _row_century(row: RawRow, column_map: ColumnMap) -> int | None:
    century = resolve_century(coerce_number(_cell(row, column_map.era)))
    if century is None and column_map.year is not None:
        century = resolve_century(coerce_number(_cell(row, column_map.year)))
    return century


def _evaluate_row(
    row: RawRow,
    column_map: ColumnMap,
    policy: PolicyConfig,
    letter_codes: Mapping[str, str],
) -> tuple[int, CanonicalRecord | None]:
    """Return the number of validation stages passed and the record, if any."""
    genre = resolve_genre(_cell(row, column_map.genre), letter_codes)
    if genre is None:
        return 0, None

    century = _row_century(row, column_map)
    if century is None:
        return 1, None
    if not policy.contains(century):
        return 2, None

    score = coerce_number(_cell(row, column_map.score))
    if score is None:
        return 3, None

    title = _cell(row, column_map.title)
    author = _cell(row, column_map.author)
    identifier = _cell(row, column_map.identifier)
    record = CanonicalRecord(
        genre=genre,
        century=century,
        year_approx=synthesize_year(century, position_seed(identifier, title, author)),
        love_index=clamp_score(score),
        title=title,
        author=author,
        identifier=identifier,
    )
    return 4, record


def build_record(
    row: RawRow,
    column_map: ColumnMap,
    policy: PolicyConfig,
    letter_codes: Mapping[str, str],
) -> CanonicalRecord | None:
    _, record = _evaluate_row(row, column_map, policy, letter_codes)
    return record


def build_records(
    rows: Iterable[RawRow],
    column_map: ColumnMap,
    policy: PolicyConfig,
    letter_codes: Mapping[str, str],
) -> RecordBuildResult:
    """Normalize every row independently; invalid rows are dropped without a trace."""
    records: list[CanonicalRecord] = []
    passed = [0, 0, 0, 0, 0]
    for row in rows:
        stages, record = _evaluate_row(row, column_map, policy, letter_codes)
        for stage in range(stages + 1):
            passed[stage] += 1
        if record is not None:
            records.append(record)

    stage_counts = StageCounts(
        rows_total=passed[0],
        with_genre=passed[1],
        with_century=passed[2],
        in_window=passed[3],
        with_score=passed[4],
    )
    LOGGER.info(
        "Built %s canonical records from %s rows (window %s-%s)",
        len(records),
        stage_counts.rows_total,
        policy.century_min,
        policy.century_max,
    )
    return RecordBuildResult(records=tuple(records), stage_counts=stage_counts)


def require_min_records(
    result: RecordBuildResult,
    policy: PolicyConfig,
    *,
    column_map: ColumnMap,
    headers: Iterable[str] = (),
    resource_path: str | None = None,
) -> tuple[CanonicalRecord, ...]:
    if len(result.records) >= policy.min_records:
        return result.records

    raise InsufficientDataError(
        Diagnostic(
            kind="insufficient_data",
            message=(
                f"Too few usable rows after parsing ({len(result.records)}); "
                f"at least {policy.min_records} required"
            ),
            resource_path=resource_path,
            headers=tuple(headers),
            columns=column_map.as_dict(),
            stage_counts=result.stage_counts.as_dict(),
        )
    )
