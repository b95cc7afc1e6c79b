from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Sequence

import pandas as pd

from love_index.config import InputConfig
from love_index.errors import Diagnostic, ResourceLoadError
from love_index.io.schema import RawRow

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawTable:
    source: str
    headers: tuple[str, ...]
    rows: tuple[RawRow, ...]

    def __len__(self) -> int:
        return len(self.rows)


def _load_failure(source: str, reason: str) -> ResourceLoadError:
    return ResourceLoadError(
        Diagnostic(
            kind="resource_load",
            message=f"Could not load tabular data at {source}: {reason}",
            resource_path=source,
        )
    )


def frame_to_table(
    df: pd.DataFrame,
    source: str,
    headers: Sequence[str] | None = None,
) -> RawTable:
    """Convert a string-typed frame into read-only rows keyed by header name.

    ``headers`` overrides the frame's column labels, which pandas suffixes
    (``genre.1``) when the header row repeats a name. A repeated name keeps
    the leftmost column's value.
    """
    names = tuple(str(column) for column in (df.columns if headers is None else headers))
    if len(names) != df.shape[1]:
        raise ValueError(f"Expected {df.shape[1]} header names, got {len(names)}")

    # Short rows come back as NaN even with keep_default_na=False.
    values = df.fillna("").astype(str).itertuples(index=False, name=None)
    rows = []
    for row_values in values:
        row: dict[str, str] = {}
        for name, value in zip(names, row_values):
            row.setdefault(name, value)
        rows.append(MappingProxyType(row))
    return RawTable(source=source, headers=names, rows=tuple(rows))


def _read_kwargs(config: InputConfig) -> dict:
    return {
        "sep": config.delimiter,
        "encoding": config.encoding,
        "dtype": str,
        "keep_default_na": False,
        "skipinitialspace": True,
        # A trailing delimiter must not shift cells under the wrong header.
        "index_col": False,
    }


def load_raw_table(source: str | Path, config: InputConfig | None = None) -> RawTable:
    """Read a delimited text table as raw strings, header row first."""
    input_config = config or InputConfig()
    source_label = str(source)
    read_kwargs = _read_kwargs(input_config)
    try:
        # Every cell stays a string; typed extraction happens in preprocess/.
        df = pd.read_csv(source, **read_kwargs)
        # Header names exactly as written, without pandas' duplicate suffixes.
        header_row = pd.read_csv(source, header=None, nrows=1, **read_kwargs)
    except FileNotFoundError as exc:
        raise _load_failure(source_label, "file not found") from exc
    except pd.errors.EmptyDataError as exc:
        raise _load_failure(source_label, "no columns to parse") from exc
    except (pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise _load_failure(source_label, f"unparseable input ({exc})") from exc
    except OSError as exc:
        raise _load_failure(source_label, str(exc)) from exc

    if df.columns.empty:
        raise _load_failure(source_label, "no header row")

    headers = None
    if header_row.shape[1] == df.shape[1] and not header_row.empty:
        headers = header_row.iloc[0].tolist()
    if headers is not None and len(set(headers)) != len(headers):
        LOGGER.warning("Duplicate header names in %s; the leftmost column is used", source_label)

    table = frame_to_table(df, source=source_label, headers=headers)
    LOGGER.info(
        "Loaded %s rows with %s columns from %s",
        len(table.rows),
        len(table.headers),
        source_label,
    )
    return table
