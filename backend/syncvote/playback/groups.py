from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from threading import RLock

from ..errors import PlaybackHandoffError

logger = logging.getLogger(__name__)


class PlaybackGroups(ABC):
    """The group-playback mechanism, seen from the voting side."""

    @abstractmethod
    def members(self, group_ref: str) -> list[str]:
        ...

    @abstractmethod
    def group_of(self, user_id: str) -> str | None:
        ...

    @abstractmethod
    def enqueue(self, group_ref: str, item_ids: list[str]) -> None:
        """Queue items for the group. Raises PlaybackHandoffError on failure."""


class InMemoryPlaybackGroups(PlaybackGroups):
    def __init__(self) -> None:
        self._lock = RLock()
        self._groups: dict[str, list[str]] = {}
        self._queues: dict[str, list[str]] = {}

    def join(self, group_ref: str, user_id: str) -> None:
        with self._lock:
            for members in self._groups.values():
                if user_id in members:
                    members.remove(user_id)
            self._groups.setdefault(group_ref, []).append(user_id)

    def leave(self, user_id: str) -> None:
        with self._lock:
            for members in self._groups.values():
                if user_id in members:
                    members.remove(user_id)

    def members(self, group_ref: str) -> list[str]:
        with self._lock:
            return list(self._groups.get(group_ref, []))

    def group_of(self, user_id: str) -> str | None:
        with self._lock:
            for ref, members in self._groups.items():
                if user_id in members:
                    return ref
            return None

    def enqueue(self, group_ref: str, item_ids: list[str]) -> None:
        with self._lock:
            if group_ref not in self._groups:
                raise PlaybackHandoffError(group_ref, "unknown group")
            self._queues.setdefault(group_ref, []).extend(item_ids)
        logger.info("Queued %s for playback group %s", item_ids, group_ref)

    def queue(self, group_ref: str) -> list[str]:
        with self._lock:
            return list(self._queues.get(group_ref, []))
