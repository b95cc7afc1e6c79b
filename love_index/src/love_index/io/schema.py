from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Iterable, Mapping

from love_index.config import ColumnsConfig, RoleCandidates


class Role(str, Enum):
    genre = "genre"
    era = "era"
    year = "year"
    score = "score"
    title = "title"
    author = "author"
    identifier = "identifier"


REQUIRED_ROLES: tuple[Role, ...] = (Role.genre, Role.era, Role.score)

# Raw cells keyed by header name, as read from the input table.
RawRow = Mapping[str, str]


@dataclass(frozen=True)
class ColumnMap:
    genre: str | None = None
    era: str | None = None
    year: str | None = None
    score: str | None = None
    title: str | None = None
    author: str | None = None
    identifier: str | None = None

    def get(self, role: Role) -> str | None:
        return getattr(self, role.value)

    def missing(self, roles: Iterable[Role] = REQUIRED_ROLES) -> list[Role]:
        return [role for role in roles if self.get(role) is None]

    def as_dict(self) -> dict[str, str | None]:
        return asdict(self)


def resolve_column(headers: Iterable[str], candidates: RoleCandidates) -> str | None:
    """Return the header for one role, preferring any exact name over any substring hit."""
    lowered = [(header, str(header).strip().lower()) for header in headers]

    for candidate in candidates.exact:
        target = candidate.strip().lower()
        for header, low in lowered:
            if low == target:
                return header

    for candidate in candidates.fuzzy:
        needle = candidate.strip().lower()
        if not needle:
            continue
        for header, low in lowered:
            if needle in low:
                return header
    return None


def resolve_columns(headers: Iterable[str], columns: ColumnsConfig) -> ColumnMap:
    header_list = list(headers)
    resolved = {
        role.value: resolve_column(header_list, getattr(columns, role.value)) for role in Role
    }
    return ColumnMap(**resolved)
