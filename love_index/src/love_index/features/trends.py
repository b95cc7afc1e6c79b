from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import pandas as pd
import statsmodels.api as sm

from love_index.features.aggregates import records_to_frame
from love_index.pipeline.build_records import CanonicalRecord

LOGGER = logging.getLogger(__name__)

MIN_DISTINCT_CENTURIES = 3
MIN_CENTURIES_PER_SEGMENT = 2


@dataclass(frozen=True)
class TrendFit:
    model: str
    coefficients: dict[str, float]
    p_values: dict[str, float]
    r_squared: float
    n: int


@dataclass(frozen=True)
class TrendModels:
    quadratic: TrendFit | None
    segmented: TrendFit | None
    break_century: int


def _fit_ols(model: str, y: pd.Series, design: pd.DataFrame) -> TrendFit | None:
    x = sm.add_constant(design, has_constant="add")
    if len(y) <= x.shape[1]:
        LOGGER.info("Skipping %s trend: %s records for %s parameters", model, len(y), x.shape[1])
        return None
    result = sm.OLS(y, x).fit()
    return TrendFit(
        model=model,
        coefficients={name: float(value) for name, value in result.params.items()},
        p_values={name: float(value) for name, value in result.pvalues.items()},
        r_squared=float(result.rsquared),
        n=int(result.nobs),
    )


def fit_quadratic_trend(frame: pd.DataFrame) -> TrendFit | None:
    century = frame["century"].astype(float)
    if century.nunique() < MIN_DISTINCT_CENTURIES:
        return None
    design = pd.DataFrame({"century": century, "century_sq": century**2})
    return _fit_ols("quadratic", frame["love_index"].astype(float), design)


def fit_segmented_trend(frame: pd.DataFrame, break_century: int) -> TrendFit | None:
    """Piecewise linear fit with a level and slope change after ``break_century``."""
    century = frame["century"].astype(float)
    post_break = (century > break_century).astype(float)
    before = century[post_break == 0.0]
    after = century[post_break == 1.0]
    if (
        before.nunique() < MIN_CENTURIES_PER_SEGMENT
        or after.nunique() < MIN_CENTURIES_PER_SEGMENT
    ):
        return None
    design = pd.DataFrame(
        {
            "century": century,
            "post_break": post_break,
            "century_x_post_break": century * post_break,
        }
    )
    return _fit_ols("segmented", frame["love_index"].astype(float), design)


def fit_trend_models(
    records: Sequence[CanonicalRecord],
    break_century: int = 12,
) -> TrendModels:
    frame = records_to_frame(records)
    if frame.empty:
        return TrendModels(quadratic=None, segmented=None, break_century=break_century)
    return TrendModels(
        quadratic=fit_quadratic_trend(frame),
        segmented=fit_segmented_trend(frame, break_century=break_century),
        break_century=break_century,
    )
