from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

import pandas as pd

from love_index.config import AppConfig, PolicyConfig
from love_index.errors import Diagnostic, PipelineError, ResourceLoadError, SchemaDetectionError
from love_index.features.aggregates import (
    AggregateBucket,
    Spotlights,
    build_century_genre_counts,
    build_genre_counts,
    build_genre_series,
    build_pooled_series,
    build_spotlights,
)
from love_index.features.trends import TrendModels, fit_trend_models
from love_index.io.read import RawTable, load_raw_table
from love_index.io.schema import REQUIRED_ROLES, ColumnMap, resolve_columns
from love_index.pipeline.build_records import (
    CanonicalRecord,
    StageCounts,
    build_records,
    require_min_records,
)
from love_index.preprocess.genre import GenreCode

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    view: str
    policy: PolicyConfig
    source: str
    headers: tuple[str, ...]
    column_map: ColumnMap
    stage_counts: StageCounts
    records: tuple[CanonicalRecord, ...]
    pooled: tuple[AggregateBucket, ...]
    by_genre: Mapping[GenreCode, tuple[AggregateBucket, ...]]
    genre_counts: Mapping[GenreCode, int]
    century_genre_counts: tuple[Mapping[str, int], ...]
    spotlights: Spotlights
    trends: TrendModels | None


@dataclass(frozen=True)
class PipelineOutcome:
    result: PipelineResult | None = None
    diagnostic: Diagnostic | None = None

    @property
    def ok(self) -> bool:
        return self.result is not None


def _frozen_rows(frame: pd.DataFrame) -> tuple[Mapping[str, int], ...]:
    return tuple(
        MappingProxyType({str(key): int(value) for key, value in row.items()})
        for row in frame.to_dict(orient="records")
    )


def detect_columns(table: RawTable, config: AppConfig) -> ColumnMap:
    column_map = resolve_columns(table.headers, config.columns)
    LOGGER.info("Detected columns: %s", column_map.as_dict())
    missing = column_map.missing(REQUIRED_ROLES)
    if missing:
        missing_str = ", ".join(role.value for role in missing)
        raise SchemaDetectionError(
            Diagnostic(
                kind="schema_detection",
                message=f"Could not detect required columns: {missing_str}",
                resource_path=table.source,
                headers=table.headers,
                columns=column_map.as_dict(),
            )
        )
    return column_map


def run_table(table: RawTable, config: AppConfig, *, view: str | None = None) -> PipelineResult:
    view_name = view or config.default_view
    policy = config.policy_for(view_name)
    column_map = detect_columns(table, config)

    built = build_records(
        table.rows,
        column_map=column_map,
        policy=policy,
        letter_codes=config.genres.letter_codes,
    )
    records = require_min_records(
        built,
        policy,
        column_map=column_map,
        headers=table.headers,
        resource_path=table.source,
    )

    trends = None
    if config.trends.enabled:
        trends = fit_trend_models(records, break_century=config.trends.break_century)

    return PipelineResult(
        view=view_name,
        policy=policy,
        source=table.source,
        headers=table.headers,
        column_map=column_map,
        stage_counts=built.stage_counts,
        records=records,
        pooled=build_pooled_series(records),
        by_genre=MappingProxyType(build_genre_series(records)),
        genre_counts=MappingProxyType(build_genre_counts(records)),
        century_genre_counts=_frozen_rows(build_century_genre_counts(records, policy)),
        spotlights=build_spotlights(records, top_n=config.spotlights.top_n),
        trends=trends,
    )


def run_pipeline(
    config: AppConfig,
    *,
    view: str | None = None,
    source: str | Path | None = None,
) -> PipelineResult:
    """Load the configured table and run one view over it; pipeline failures raise."""
    # Unknown view names are configuration errors, surfaced before any I/O.
    config.policy_for(view)
    effective_source = source if source is not None else config.input.csv_path
    if effective_source is None:
        raise ResourceLoadError(
            Diagnostic(
                kind="resource_load",
                message="No input path configured. Set input.csv_path or pass a source.",
            )
        )
    table = load_raw_table(effective_source, config.input)
    return run_table(table, config, view=view)


def run_view(
    config: AppConfig,
    *,
    view: str | None = None,
    source: str | Path | None = None,
) -> PipelineOutcome:
    try:
        result = run_pipeline(config, view=view, source=source)
    except PipelineError as exc:
        LOGGER.warning("Pipeline ended with %s diagnostic: %s", exc.diagnostic.kind, exc)
        return PipelineOutcome(diagnostic=exc.diagnostic)
    return PipelineOutcome(result=result)
