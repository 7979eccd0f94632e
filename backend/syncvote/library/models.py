from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from ..voting.models import SortBy


@dataclass
class ItemInfo:
    name: str
    year: int | None = None
    type: str = "Unknown"


@dataclass
class MediaItem:
    id: str
    name: str
    type: str = "Movie"
    year: int | None = None
    genres: list[str] = field(default_factory=list)
    collection_ids: list[str] = field(default_factory=list)
    community_rating: float | None = None
    official_rating: str | None = None
    # Numeric parental level; None = unrated.
    parental_rating: int | None = None
    premiere_date: date | None = None
    overview: str | None = None
    run_time_ticks: int | None = None
    # Empty = visible to every user.
    allowed_users: set[str] = field(default_factory=set)

    def visible_to(self, user_id: str | None) -> bool:
        return not self.allowed_users or (user_id is not None and user_id in self.allowed_users)


@dataclass
class Collection:
    id: str
    name: str
    type: str = "mixed"
    allowed_users: set[str] = field(default_factory=set)

    def visible_to(self, user_id: str | None) -> bool:
        return not self.allowed_users or (user_id is not None and user_id in self.allowed_users)


@dataclass
class CollectionInfo:
    id: str
    name: str
    type: str
    item_count: int


@dataclass
class CandidateQuery:
    collections: list[str] = field(default_factory=list)
    genres: list[str] = field(default_factory=list)
    item_types: list[str] = field(default_factory=lambda: ["Movie"])
    max_parental_rating: int | None = None
    sort_by: SortBy = SortBy.RANDOM
    skip: int = 0
    limit: int = 20


@dataclass(frozen=True)
class ParentalRating:
    value: int
    name: str


PARENTAL_RATINGS: tuple[ParentalRating, ...] = (
    ParentalRating(0, "Unrated"),
    ParentalRating(1, "G / All Ages"),
    ParentalRating(6, "PG / 6+"),
    ParentalRating(12, "PG-13 / 12+"),
    ParentalRating(16, "R / 16+"),
    ParentalRating(18, "NC-17 / 18+"),
)
