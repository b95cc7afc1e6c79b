from __future__ import annotations

import csv
from pathlib import Path

import pytest

from love_index.config import AppConfig
from love_index.errors import ResourceLoadError, SchemaDetectionError
from love_index.pipeline.run_all import run_pipeline, run_view
from love_index.preprocess.genre import GENRE_ORDER, GenreCode

HEADERS = ["version_uri", "title_lat", "author_lat", "date", "GenreCode", "BoC_final_0_2"]
LETTERS = ["b", "d", "n", "p", "r", "k"]


def _corpus_rows(count: int) -> list[list[str]]:
    rows = []
    for index in range(count):
        century = 1 + index % 15
        score = f"{(index % 9) * 0.25:.2f}".replace(".", ",")
        rows.append(
            [
                f"{century:02d}00Author{index}.Work{index}",
                f"Work {index}",
                f"Author {index}",
                str(century),
                LETTERS[index % len(LETTERS)],
                score,
            ]
        )
    return rows


def _write_csv(path: Path, headers: list[str], rows: list[list[str]]) -> Path:
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(headers)
        writer.writerows(rows)
    return path


def test_run_pipeline_builds_records_and_aggregates(tmp_path: Path) -> None:
    rows = _corpus_rows(30)
    rows.append(["bad-1", "Broken", "Nobody", "40", "p", "1.0"])
    rows.append(["bad-2", "Broken", "Nobody", "3", "x", "1.0"])
    csv_path = _write_csv(tmp_path / "corpus.csv", HEADERS, rows)

    result = run_pipeline(AppConfig(), source=csv_path)

    assert result.view == "results"
    assert len(result.records) == 30
    assert result.stage_counts.rows_total == 32
    assert result.stage_counts.with_genre == 31
    assert result.column_map.score == "BoC_final_0_2"
    assert sum(bucket.n for bucket in result.pooled) == 30
    assert [bucket.century for bucket in result.pooled] == list(range(1, 16))
    assert list(result.by_genre) == list(GENRE_ORDER)
    assert sum(result.genre_counts.values()) == 30
    assert result.genre_counts[GenreCode.BIO] == 5
    assert all(0.0 <= record.love_index <= 2.0 for record in result.records)
    assert len(result.spotlights.top) == 5
    assert result.trends is not None and result.trends.quadratic is not None
    assert [row["century"] for row in result.century_genre_counts] == list(range(1, 16))


def test_distribution_view_uses_its_own_window(tmp_path: Path) -> None:
    csv_path = _write_csv(tmp_path / "corpus.csv", HEADERS, _corpus_rows(30))

    result = run_pipeline(AppConfig(), view="distribution", source=csv_path)

    assert all(2 <= record.century <= 15 for record in result.records)
    assert len(result.records) == 28
    assert result.stage_counts.in_window == 28


def test_run_pipeline_uses_configured_input_path(tmp_path: Path) -> None:
    csv_path = _write_csv(tmp_path / "corpus.csv", HEADERS, _corpus_rows(20))
    config = AppConfig.model_validate({"input": {"csv_path": str(csv_path)}})

    result = run_pipeline(config)

    assert result.source == str(csv_path)
    assert len(result.records) == 20


def test_row_permutation_does_not_change_aggregates(tmp_path: Path) -> None:
    rows = _corpus_rows(45)
    forward = _write_csv(tmp_path / "forward.csv", HEADERS, rows)
    backward = _write_csv(tmp_path / "backward.csv", HEADERS, list(reversed(rows)))

    first = run_pipeline(AppConfig(), source=forward)
    second = run_pipeline(AppConfig(), source=backward)

    assert first.pooled == second.pooled
    assert first.by_genre == second.by_genre
    assert first.spotlights == second.spotlights
    assert {record.year_approx for record in first.records} == {
        record.year_approx for record in second.records
    }


def test_schema_detection_failure_lists_roles_and_headers(tmp_path: Path) -> None:
    csv_path = _write_csv(
        tmp_path / "corpus.csv",
        ["version_uri", "title_lat", "GenreCode"],
        [["uri", "Title", "p"]],
    )

    with pytest.raises(SchemaDetectionError, match="era, score"):
        run_pipeline(AppConfig(), source=csv_path)

    outcome = run_view(AppConfig(), source=csv_path)
    assert not outcome.ok
    assert outcome.diagnostic is not None
    assert outcome.diagnostic.kind == "schema_detection"
    assert outcome.diagnostic.headers == ("version_uri", "title_lat", "GenreCode")
    assert "genre" in outcome.diagnostic.resolved_roles
    assert {"era", "score"} <= set(outcome.diagnostic.unresolved_roles)
    assert outcome.diagnostic.missing_required == ["era", "score"]


def test_insufficient_data_returns_diagnostic_instead_of_aggregates(tmp_path: Path) -> None:
    rows = [row for row in _corpus_rows(15) if row[3] != "1"][:9]
    csv_path = _write_csv(tmp_path / "corpus.csv", HEADERS, rows)

    outcome = run_view(AppConfig(), view="distribution", source=csv_path)

    assert outcome.result is None
    assert outcome.diagnostic is not None
    assert outcome.diagnostic.kind == "insufficient_data"
    assert outcome.diagnostic.stage_counts == {
        "rows_total": 9,
        "with_genre": 9,
        "with_century": 9,
        "in_window": 9,
        "with_score": 9,
    }
    assert outcome.diagnostic.columns["era"] == "date"


def test_missing_resource_yields_resource_load_diagnostic(tmp_path: Path) -> None:
    missing = tmp_path / "nowhere.csv"

    outcome = run_view(AppConfig(), source=missing)

    assert outcome.diagnostic is not None
    assert outcome.diagnostic.kind == "resource_load"
    assert outcome.diagnostic.resource_path == str(missing)


def test_run_pipeline_without_any_source_raises_resource_load_error() -> None:
    with pytest.raises(ResourceLoadError, match="No input path configured"):
        run_pipeline(AppConfig())


def test_unknown_view_is_a_configuration_error(tmp_path: Path) -> None:
    csv_path = _write_csv(tmp_path / "corpus.csv", HEADERS, _corpus_rows(20))

    with pytest.raises(ValueError, match="Unknown view"):
        run_view(AppConfig(), view="charts", source=csv_path)


def test_trailing_delimiter_rows_keep_their_columns(tmp_path: Path) -> None:
    csv_path = tmp_path / "corpus.csv"
    lines = ["version_uri,date,GenreCode,BoC_final_0_2"]
    lines += [f"uri-{index},3,p,1.5," for index in range(25)]
    csv_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    outcome = run_view(AppConfig(), source=csv_path)

    assert outcome.ok
    assert outcome.result is not None
    assert outcome.result.stage_counts.with_score == 25
    assert outcome.result.genre_counts[GenreCode.POE] == 25


def test_result_mappings_are_read_only(tmp_path: Path) -> None:
    csv_path = _write_csv(tmp_path / "corpus.csv", HEADERS, _corpus_rows(20))

    result = run_pipeline(AppConfig(), source=csv_path)

    with pytest.raises(TypeError):
        result.genre_counts[GenreCode.POE] = 0  # type: ignore[index]
    with pytest.raises(TypeError):
        result.by_genre[GenreCode.BIO] = ()  # type: ignore[index]
    with pytest.raises(TypeError):
        result.century_genre_counts[0]["POE"] = 0  # type: ignore[index]
