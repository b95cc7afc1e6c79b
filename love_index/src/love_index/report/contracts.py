from __future__ import annotations

import math
from dataclasses import asdict
from typing import Any

from love_index.errors import Diagnostic
from love_index.features.aggregates import AggregateBucket
from love_index.features.trends import TrendFit, TrendModels
from love_index.pipeline.build_records import CanonicalRecord
from love_index.pipeline.run_all import PipelineResult


def _finite_or_none(value: float) -> float | None:
    return float(value) if math.isfinite(value) else None


def _record_payload(record: CanonicalRecord) -> dict[str, Any]:
    payload = asdict(record)
    payload["genre"] = record.genre.value
    return payload


def _bucket_payload(buckets: tuple[AggregateBucket, ...]) -> list[dict[str, Any]]:
    return [asdict(bucket) for bucket in buckets]


def _trend_fit_payload(fit: TrendFit | None) -> dict[str, Any] | None:
    if fit is None:
        return None
    return {
        "model": fit.model,
        "n": fit.n,
        "r_squared": _finite_or_none(fit.r_squared),
        "coefficients": {
            name: _finite_or_none(value) for name, value in fit.coefficients.items()
        },
        "p_values": {name: _finite_or_none(value) for name, value in fit.p_values.items()},
    }


def _trends_payload(trends: TrendModels | None) -> dict[str, Any] | None:
    if trends is None:
        return None
    return {
        "break_century": trends.break_century,
        "quadratic": _trend_fit_payload(trends.quadratic),
        "segmented": _trend_fit_payload(trends.segmented),
    }


def build_result_payload(result: PipelineResult) -> dict[str, Any]:
    """JSON-friendly view of a pipeline result for presentation collaborators."""
    return {
        "status": "ok",
        "view": result.view,
        "source": result.source,
        "policy": result.policy.model_dump(),
        "columns": result.column_map.as_dict(),
        "headers": list(result.headers),
        "stage_counts": result.stage_counts.as_dict(),
        "records": [_record_payload(record) for record in result.records],
        "pooled": _bucket_payload(result.pooled),
        "by_genre": {
            genre.value: _bucket_payload(buckets) for genre, buckets in result.by_genre.items()
        },
        "genre_counts": {genre.value: count for genre, count in result.genre_counts.items()},
        "century_genre_counts": [dict(row) for row in result.century_genre_counts],
        "spotlights": {
            "top": [_record_payload(record) for record in result.spotlights.top],
            "bottom": [_record_payload(record) for record in result.spotlights.bottom],
        },
        "trends": _trends_payload(result.trends),
    }


def build_diagnostic_payload(diagnostic: Diagnostic) -> dict[str, Any]:
    return {
        "status": "error",
        "kind": diagnostic.kind,
        "message": diagnostic.message,
        "resource_path": diagnostic.resource_path,
        "headers": list(diagnostic.headers),
        "columns": dict(diagnostic.columns),
        "resolved_roles": diagnostic.resolved_roles,
        "unresolved_roles": diagnostic.unresolved_roles,
        "missing_required": diagnostic.missing_required,
        "stage_counts": (
            dict(diagnostic.stage_counts) if diagnostic.stage_counts is not None else None
        ),
    }
