from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Iterable


TIME_LIMIT_MIN = 1
TIME_LIMIT_MAX = 120
DEFAULT_ITEM_TYPES = ("Movie",)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


def clamp_time_limit(minutes: int) -> int:
    return max(TIME_LIMIT_MIN, min(TIME_LIMIT_MAX, int(minutes)))


class SortBy(str, Enum):
    RANDOM = "Random"
    TITLE = "Title"
    COMMUNITY_RATING = "CommunityRating"
    PREMIERE_DATE = "PremiereDate"

    @classmethod
    def parse(cls, raw) -> "SortBy":
        """Case-insensitive lookup; anything unparsable falls back to Random."""
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, str):
            return cls.RANDOM
        key = raw.strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        return cls.RANDOM


@dataclass
class RoomSpec:
    """Creation parameters supplied by the organizer."""

    name: str = ""
    external_group_ref: str | None = None
    time_limit_minutes: int = 5
    sort_by: str = "Random"
    selected_collections: list[str] = field(default_factory=list)
    selected_genres: list[str] = field(default_factory=list)
    max_parental_rating: int | None = None
    item_types: list[str] = field(default_factory=lambda: list(DEFAULT_ITEM_TYPES))


@dataclass
class Room:
    organizer_id: str
    id: str = field(default_factory=new_id)
    name: str = ""
    external_group_ref: str | None = None
    members: list[str] = field(default_factory=list)
    is_active: bool = True
    is_voting_active: bool = False
    time_limit_minutes: int = 5
    sort_by: SortBy = SortBy.RANDOM
    selected_collections: list[str] = field(default_factory=list)
    selected_genres: list[str] = field(default_factory=list)
    max_parental_rating: int | None = None
    item_types: list[str] = field(default_factory=lambda: list(DEFAULT_ITEM_TYPES))
    created_at: datetime = field(default_factory=utcnow)
    voting_started_at: datetime | None = None

    def __post_init__(self) -> None:
        self.set_time_limit(self.time_limit_minutes)
        self.set_selected_collections(self.selected_collections)
        self.set_selected_genres(self.selected_genres)
        self.set_item_types(self.item_types)
        if self.organizer_id not in self.members:
            self.members.insert(0, self.organizer_id)

    def add_member(self, user_id: str) -> bool:
        if user_id in self.members:
            return False
        self.members.append(user_id)
        return True

    def set_time_limit(self, minutes: int) -> None:
        self.time_limit_minutes = clamp_time_limit(minutes)

    def set_selected_collections(self, ids: Iterable[str]) -> None:
        self.selected_collections = _unique(str(i) for i in ids if i)

    def set_selected_genres(self, genres: Iterable[str]) -> None:
        self.selected_genres = _unique(g.strip() for g in genres if isinstance(g, str) and g.strip())

    def set_item_types(self, types: Iterable[str]) -> None:
        cleaned = _unique(t.strip() for t in types if isinstance(t, str) and t.strip())
        self.item_types = cleaned or list(DEFAULT_ITEM_TYPES)

    @property
    def voting_ends_at(self) -> datetime | None:
        # Advisory only; nothing in the engine acts on it.
        if self.voting_started_at is None:
            return None
        return self.voting_started_at + timedelta(minutes=self.time_limit_minutes)


@dataclass
class Vote:
    room_id: str
    user_id: str
    item_id: str
    is_like: bool
    id: str = field(default_factory=new_id)
    voted_at: datetime = field(default_factory=utcnow)

    @property
    def key(self) -> tuple[str, str, str]:
        return self.room_id, self.user_id, self.item_id


@dataclass
class UserPermissions:
    user_id: str
    can_organize: bool = True
    can_vote: bool = True


@dataclass
class VotedItem:
    item_id: str
    vote_count: int
    name: str = "Unknown"
    year: int | None = None
    type: str = "Unknown"


@dataclass
class VotingResults:
    room_id: str
    liked_items: list[VotedItem] = field(default_factory=list)

    @property
    def winner(self) -> VotedItem | None:
        return self.liked_items[0] if self.liked_items else None


def _unique(values: Iterable[str]) -> list[str]:
    seen: dict[str, None] = {}
    for v in values:
        seen.setdefault(v, None)
    return list(seen)
