from __future__ import annotations

from threading import RLock

from .models import Room, UserPermissions, Vote


class RoomRegistry:
    """In-memory storage for rooms, votes and permission records.

    Every method takes ``lock``. It is reentrant so callers can hold it
    across a check-then-mutate sequence that spans several calls.
    """

    def __init__(self) -> None:
        self.lock = RLock()
        self._rooms: dict[str, Room] = {}
        self._votes: list[Vote] = []
        self._permissions: dict[str, UserPermissions] = {}

    def add_room(self, room: Room) -> bool:
        with self.lock:
            if room.id in self._rooms:
                return False
            self._rooms[room.id] = room
            return True

    def find_room(self, room_id: str) -> Room | None:
        with self.lock:
            return self._rooms.get(room_id)

    def list_rooms(self) -> list[Room]:
        with self.lock:
            return list(self._rooms.values())

    def list_active_rooms(self) -> list[Room]:
        with self.lock:
            return [r for r in self._rooms.values() if r.is_active]

    def add_vote(self, vote: Vote) -> None:
        with self.lock:
            self._votes = [v for v in self._votes if v.key != vote.key]
            self._votes.append(vote)

    def votes_for_room(self, room_id: str, likes_only: bool = False) -> list[Vote]:
        with self.lock:
            return [
                v for v in self._votes
                if v.room_id == room_id and (v.is_like or not likes_only)
            ]

    def get_permissions(self, user_id: str) -> UserPermissions | None:
        with self.lock:
            return self._permissions.get(user_id)

    def put_permissions(self, permissions: UserPermissions) -> UserPermissions:
        with self.lock:
            return self._permissions.setdefault(permissions.user_id, permissions)
