from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from love_index.preprocess.genre import GENRE_ORDER

DEFAULT_VIEW = "results"
CSV_PATH_ENV_VAR = "LOVE_INDEX_CSV_PATH"


class RoleCandidates(BaseModel):
    """Header names tried for one semantic role: exact names first, then substrings."""

    model_config = ConfigDict(frozen=True)

    exact: tuple[str, ...] = ()
    fuzzy: tuple[str, ...] = ()


class ColumnsConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    genre: RoleCandidates = RoleCandidates(
        exact=("GenreCode", "genre_code", "genre", "GenreLabel", "genre_label", "genre_abbr"),
        fuzzy=("genrecode", "genre"),
    )
    era: RoleCandidates = RoleCandidates(
        exact=("century", "century_ah", "ah_century", "centuryAH", "century_hijri", "date"),
        fuzzy=("century", "date"),
    )
    year: RoleCandidates = RoleCandidates(
        exact=("year", "year_ah", "ah_year", "hijri_year"),
        fuzzy=("year", "hijri"),
    )
    score: RoleCandidates = RoleCandidates(
        exact=("BoC_final_0_2", "loveindex", "love_index"),
        fuzzy=("boc_final", "love", "index"),
    )
    title: RoleCandidates = RoleCandidates(
        exact=("title_lat", "title", "book_title", "work_title"),
        fuzzy=("title",),
    )
    author: RoleCandidates = RoleCandidates(
        exact=("author_lat", "author", "author_name"),
        fuzzy=("author",),
    )
    identifier: RoleCandidates = RoleCandidates(
        exact=("version_uri", "uri", "work_id", "id"),
        fuzzy=("version_uri", "uri", "id"),
    )


class GenreConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Single-letter codes used by the GenreCode column of the scored corpus.
    letter_codes: dict[str, str] = Field(
        default_factory=lambda: {
            "b": "BIO",
            "d": "DEV",
            "n": "PHI",
            "p": "POE",
            "r": "RHE",
            "k": "THE",
        }
    )

    @field_validator("letter_codes")
    @classmethod
    def _check_letter_codes(cls, value: dict[str, str]) -> dict[str, str]:
        normalized: dict[str, str] = {}
        for letter, code in value.items():
            key = str(letter).strip().lower()
            target = str(code).strip().upper()
            if not key:
                raise ValueError("genre letter codes must be non-empty")
            if target not in GENRE_ORDER:
                raise ValueError(f"Unknown genre code for letter '{key}': {code}")
            normalized[key] = target
        return normalized


class PolicyConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    century_min: int = Field(default=1, ge=1, le=30)
    century_max: int = Field(default=15, ge=1, le=30)
    min_records: int = Field(default=20, ge=1)

    @model_validator(mode="after")
    def _check_window(self) -> "PolicyConfig":
        if self.century_min > self.century_max:
            raise ValueError("century_min must be <= century_max")
        return self

    def contains(self, century: int) -> bool:
        return self.century_min <= century <= self.century_max

    @property
    def centuries(self) -> list[int]:
        return list(range(self.century_min, self.century_max + 1))


def _default_views() -> dict[str, PolicyConfig]:
    return {
        "results": PolicyConfig(century_min=1, century_max=15, min_records=20),
        "distribution": PolicyConfig(century_min=2, century_max=15, min_records=10),
    }


class InputConfig(BaseModel):
    csv_path: str | None = None
    delimiter: str = Field(default=",", min_length=1)
    encoding: str = "utf-8-sig"


class TrendsConfig(BaseModel):
    enabled: bool = True
    break_century: int = Field(default=12, ge=2, le=30)


class SpotlightConfig(BaseModel):
    top_n: int = Field(default=5, ge=1)


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")

    columns: ColumnsConfig = Field(default_factory=ColumnsConfig)
    genres: GenreConfig = Field(default_factory=GenreConfig)
    views: dict[str, PolicyConfig] = Field(default_factory=_default_views)
    default_view: str = DEFAULT_VIEW
    input: InputConfig = Field(default_factory=InputConfig)
    trends: TrendsConfig = Field(default_factory=TrendsConfig)
    spotlights: SpotlightConfig = Field(default_factory=SpotlightConfig)

    @model_validator(mode="after")
    def _check_default_view(self) -> "AppConfig":
        if self.default_view not in self.views:
            raise ValueError(f"default_view '{self.default_view}' is not defined in views")
        return self

    def policy_for(self, view: str | None = None) -> PolicyConfig:
        name = view or self.default_view
        if name not in self.views:
            available = ", ".join(sorted(self.views))
            raise ValueError(f"Unknown view '{name}'. Available views: {available}")
        return self.views[name]


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def _resolve_optional_path(path_value: str | None, base_dir: Path) -> str | None:
    if not path_value:
        return None
    if "://" in path_value:
        return path_value
    candidate = Path(path_value)
    if candidate.is_absolute():
        return str(candidate)
    return str((base_dir / candidate).resolve())


def load_config(path: Path) -> AppConfig:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    config = AppConfig.model_validate(data)
    base_dir = path.resolve().parent

    config.input.csv_path = _resolve_optional_path(
        config.input.csv_path, base_dir
    ) or os.getenv(CSV_PATH_ENV_VAR)
    return config
