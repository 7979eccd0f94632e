from __future__ import annotations

import json
import logging
import random
from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from threading import RLock

from ..voting.models import SortBy
from .models import CandidateQuery, Collection, CollectionInfo, ItemInfo, MediaItem

logger = logging.getLogger(__name__)


class ItemDirectory(ABC):
    """Read-only view of the media catalog."""

    @abstractmethod
    def resolve(self, item_id: str) -> ItemInfo | None:
        """Return display metadata, None if unknown. May raise ItemLookupError."""

    @abstractmethod
    def query_candidates(self, query: CandidateQuery, user_id: str | None) -> tuple[list[MediaItem], int]:
        """Return one page of matching items and the total match count."""

    @abstractmethod
    def knows(self, item_id: str) -> bool:
        """True if the id names an item or a collection."""

    @abstractmethod
    def check_visibility(self, item_id: str, user_id: str | None) -> bool:
        ...

    @abstractmethod
    def list_collections(self, user_id: str | None) -> list[CollectionInfo]:
        ...

    @abstractmethod
    def list_genres(self, user_id: str | None) -> list[str]:
        ...


class InMemoryItemDirectory(ItemDirectory):
    def __init__(
        self,
        items: list[MediaItem] | None = None,
        collections: list[Collection] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._lock = RLock()
        self._items: dict[str, MediaItem] = {i.id: i for i in (items or [])}
        self._collections: dict[str, Collection] = {c.id: c for c in (collections or [])}
        self._rng = rng or random.Random()

    def add_item(self, item: MediaItem) -> None:
        with self._lock:
            self._items[item.id] = item

    def add_collection(self, collection: Collection) -> None:
        with self._lock:
            self._collections[collection.id] = collection

    def get_item(self, item_id: str) -> MediaItem | None:
        with self._lock:
            return self._items.get(item_id)

    def resolve(self, item_id: str) -> ItemInfo | None:
        item = self.get_item(item_id)
        if item is None:
            return None
        return ItemInfo(name=item.name, year=item.year, type=item.type)

    def knows(self, item_id: str) -> bool:
        with self._lock:
            return item_id in self._items or item_id in self._collections

    def check_visibility(self, item_id: str, user_id: str | None) -> bool:
        with self._lock:
            item = self._items.get(item_id)
            if item is not None:
                return item.visible_to(user_id)
            collection = self._collections.get(item_id)
            if collection is not None:
                return collection.visible_to(user_id)
            return False

    def query_candidates(self, query: CandidateQuery, user_id: str | None) -> tuple[list[MediaItem], int]:
        with self._lock:
            matches = [i for i in self._items.values() if i.visible_to(user_id) and _matches(i, query)]

        matches = _sorted(matches, query.sort_by, self._rng)
        skip = max(0, query.skip)
        limit = max(0, query.limit)
        return matches[skip:skip + limit], len(matches)

    def list_collections(self, user_id: str | None) -> list[CollectionInfo]:
        with self._lock:
            result = []
            for c in self._collections.values():
                if not c.visible_to(user_id):
                    continue
                count = sum(
                    1 for i in self._items.values()
                    if c.id in i.collection_ids and i.visible_to(user_id)
                )
                result.append(CollectionInfo(id=c.id, name=c.name, type=c.type, item_count=count))
        return sorted(result, key=lambda c: c.name.lower())

    def list_genres(self, user_id: str | None) -> list[str]:
        with self._lock:
            genres = {g for i in self._items.values() if i.visible_to(user_id) for g in i.genres}
        return sorted(genres)


def _matches(item: MediaItem, query: CandidateQuery) -> bool:
    if query.item_types and item.type not in query.item_types:
        return False
    if query.collections and not set(query.collections) & set(item.collection_ids):
        return False
    if query.genres:
        wanted = {g.lower() for g in query.genres}
        if not wanted & {g.lower() for g in item.genres}:
            return False
    if query.max_parental_rating is not None and item.parental_rating is not None:
        if item.parental_rating > query.max_parental_rating:
            return False
    return True


def _sorted(items: list[MediaItem], sort_by: SortBy, rng: random.Random) -> list[MediaItem]:
    if sort_by == SortBy.TITLE:
        return sorted(items, key=lambda i: i.name.lower())
    if sort_by == SortBy.COMMUNITY_RATING:
        return sorted(items, key=lambda i: (i.community_rating is None, -(i.community_rating or 0.0)))
    if sort_by == SortBy.PREMIERE_DATE:
        return sorted(items, key=lambda i: (i.premiere_date is None, -(i.premiere_date or date.min).toordinal()))
    shuffled = list(items)
    rng.shuffle(shuffled)
    return shuffled


def load_catalog(path: str | Path) -> InMemoryItemDirectory:
    """Build a directory from a JSON file with ``items`` and ``collections`` arrays."""
    raw = json.loads(Path(path).read_text(encoding="utf-8"))

    collections = [
        Collection(
            id=str(c["id"]),
            name=str(c.get("name", "")),
            type=str(c.get("type", "mixed")),
            allowed_users=set(c.get("allowedUsers") or []),
        )
        for c in raw.get("collections", [])
    ]

    items = []
    for i in raw.get("items", []):
        premiere = i.get("premiereDate")
        items.append(
            MediaItem(
                id=str(i["id"]),
                name=str(i.get("name", "")),
                type=str(i.get("type", "Movie")),
                year=i.get("year"),
                genres=list(i.get("genres") or []),
                collection_ids=[str(c) for c in i.get("collectionIds") or []],
                community_rating=i.get("communityRating"),
                official_rating=i.get("officialRating"),
                parental_rating=i.get("parentalRating"),
                premiere_date=date.fromisoformat(premiere) if premiere else None,
                overview=i.get("overview"),
                run_time_ticks=i.get("runTimeTicks"),
                allowed_users=set(i.get("allowedUsers") or []),
            )
        )

    logger.info("Loaded catalog %s: %d items, %d collections", path, len(items), len(collections))
    return InMemoryItemDirectory(items=items, collections=collections)
