from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable

from ..errors import ItemLookupError, PlaybackHandoffError
from ..library.directory import ItemDirectory
from ..library.models import CandidateQuery, MediaItem
from ..playback.groups import PlaybackGroups
from .models import (
    Room,
    RoomSpec,
    SortBy,
    UserPermissions,
    Vote,
    VotedItem,
    VotingResults,
    new_id,
    utcnow,
)
from .registry import RoomRegistry

logger = logging.getLogger(__name__)


class Outcome(Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    PRECONDITION_FAILED = "precondition_failed"

    def __bool__(self) -> bool:
        return self is Outcome.OK


@dataclass
class GroupInfo:
    group_id: str | None = None
    is_leader: bool = False
    member_user_ids: list[str] = field(default_factory=list)

    @property
    def member_count(self) -> int:
        return len(self.member_user_ids)


class VotingCoordinator:
    """All room state transitions go through here.

    Mutations hold the registry lock for the whole check-then-mutate
    sequence. Item directory lookups run after the lock is released.
    """

    def __init__(
        self,
        registry: RoomRegistry,
        directory: ItemDirectory,
        playback: PlaybackGroups | None = None,
        *,
        clock: Callable[[], datetime] = utcnow,
        max_members: int = 0,
        default_can_organize: bool = True,
        default_can_vote: bool = True,
    ) -> None:
        self.registry = registry
        self.directory = directory
        self.playback = playback
        self.clock = clock
        self.max_members = max_members
        self.default_can_organize = default_can_organize
        self.default_can_vote = default_can_vote

    # ---- rooms ----

    def create_room(self, organizer_id: str, spec: RoomSpec) -> Room:
        room = Room(
            organizer_id=organizer_id,
            name=spec.name,
            external_group_ref=spec.external_group_ref or None,
            time_limit_minutes=spec.time_limit_minutes,
            sort_by=SortBy.parse(spec.sort_by),
            selected_collections=list(spec.selected_collections),
            selected_genres=list(spec.selected_genres),
            max_parental_rating=spec.max_parental_rating,
            item_types=list(spec.item_types),
            created_at=self.clock(),
        )
        with self.registry.lock:
            while not self.registry.add_room(room):
                room.id = new_id()
        logger.info("Created voting room %s by user %s", room.id, organizer_id)
        return room

    def list_active_rooms(self) -> list[Room]:
        return self.registry.list_active_rooms()

    def get_room(self, room_id: str) -> Room | None:
        return self.registry.find_room(room_id)

    def join_room(self, room_id: str, user_id: str) -> Outcome:
        with self.registry.lock:
            room = self.registry.find_room(room_id)
            if room is None or not room.is_active:
                logger.debug("Join rejected: room %s missing or inactive", room_id)
                return Outcome.NOT_FOUND
            if user_id in room.members:
                logger.debug("Join rejected: %s already in room %s", user_id, room_id)
                return Outcome.PRECONDITION_FAILED
            if self.max_members and len(room.members) >= self.max_members:
                logger.debug("Join rejected: room %s is full", room_id)
                return Outcome.PRECONDITION_FAILED
            room.add_member(user_id)
        logger.info("User %s joined room %s", user_id, room_id)
        return Outcome.OK

    def start_voting(self, room_id: str, requester_id: str) -> Outcome:
        with self.registry.lock:
            room = self.registry.find_room(room_id)
            if room is None or not room.is_active:
                return Outcome.NOT_FOUND
            if requester_id != room.organizer_id or room.is_voting_active:
                logger.debug("Start rejected in room %s for user %s", room_id, requester_id)
                return Outcome.PRECONDITION_FAILED
            room.is_voting_active = True
            room.voting_started_at = self.clock()
        logger.info("Voting started in room %s by user %s", room_id, requester_id)
        return Outcome.OK

    def close_room(self, room_id: str, requester_id: str) -> Outcome:
        with self.registry.lock:
            room = self.registry.find_room(room_id)
            if room is None or not room.is_active:
                return Outcome.NOT_FOUND
            if requester_id != room.organizer_id:
                return Outcome.PRECONDITION_FAILED
            room.is_active = False
            room.is_voting_active = False
        logger.info("Room %s closed by user %s", room_id, requester_id)
        return Outcome.OK

    def sweep_expired_rooms(self, ttl: timedelta, now: datetime | None = None) -> list[str]:
        """Deactivate active rooms created more than ``ttl`` ago."""
        now = now or self.clock()
        expired = []
        with self.registry.lock:
            for room in self.registry.list_active_rooms():
                if now - room.created_at >= ttl:
                    room.is_active = False
                    room.is_voting_active = False
                    expired.append(room.id)
        if expired:
            logger.info("Expired %d room(s): %s", len(expired), ", ".join(expired))
        return expired

    # ---- votes ----

    def cast_vote(self, room_id: str, user_id: str, item_id: str, is_like: bool) -> Outcome:
        with self.registry.lock:
            room = self.registry.find_room(room_id)
            if room is None or not room.is_active:
                return Outcome.NOT_FOUND
            if not room.is_voting_active or user_id not in room.members:
                logger.debug("Vote rejected in room %s for user %s", room_id, user_id)
                return Outcome.PRECONDITION_FAILED
            self.registry.add_vote(
                Vote(room_id=room_id, user_id=user_id, item_id=item_id, is_like=bool(is_like), voted_at=self.clock())
            )
        logger.info(
            "User %s voted %s for item %s in room %s",
            user_id, "like" if is_like else "dislike", item_id, room_id,
        )
        return Outcome.OK

    def get_results(self, room_id: str) -> VotingResults:
        likes = self.registry.votes_for_room(room_id, likes_only=True)

        # Groups keep the order of each item's earliest surviving like vote,
        # and the stable sort below makes that order the tie-break.
        counts: dict[str, int] = {}
        for vote in likes:
            counts[vote.item_id] = counts.get(vote.item_id, 0) + 1

        liked = [self._voted_item(item_id, count) for item_id, count in counts.items()]
        liked.sort(key=lambda v: v.vote_count, reverse=True)
        return VotingResults(room_id=room_id, liked_items=liked)

    def _voted_item(self, item_id: str, count: int) -> VotedItem:
        voted = VotedItem(item_id=item_id, vote_count=count)
        try:
            info = self.directory.resolve(item_id)
        except ItemLookupError as exc:
            logger.warning("Item lookup degraded for %s: %s", item_id, exc)
            return voted
        if info is not None:
            voted.name = info.name or "Unknown"
            voted.year = info.year
            voted.type = info.type or "Unknown"
        return voted

    # ---- permissions ----

    def get_user_permissions(self, user_id: str) -> UserPermissions:
        with self.registry.lock:
            existing = self.registry.get_permissions(user_id)
            if existing is not None:
                return existing
            return self.registry.put_permissions(
                UserPermissions(
                    user_id=user_id,
                    can_organize=self.default_can_organize,
                    can_vote=self.default_can_vote,
                )
            )

    # ---- catalog ----

    def candidates(self, room: Room, user_id: str | None, skip: int, limit: int) -> tuple[list[MediaItem], int]:
        query = CandidateQuery(
            collections=list(room.selected_collections),
            genres=list(room.selected_genres),
            item_types=list(room.item_types),
            max_parental_rating=room.max_parental_rating,
            sort_by=room.sort_by,
            skip=skip,
            limit=limit,
        )
        return self.directory.query_candidates(query, user_id)

    # ---- playback ----

    def group_info(self, user_id: str) -> GroupInfo:
        for room in self.list_active_rooms():
            if user_id in room.members and room.external_group_ref:
                return GroupInfo(
                    group_id=room.external_group_ref,
                    is_leader=room.organizer_id == user_id,
                    member_user_ids=list(room.members),
                )

        if self.playback is not None:
            group_ref = self.playback.group_of(user_id)
            if group_ref:
                members = self.playback.members(group_ref)
                return GroupInfo(
                    group_id=group_ref,
                    is_leader=bool(members) and members[0] == user_id,
                    member_user_ids=members,
                )

        return GroupInfo()

    def has_access_issues(self, user_id: str, collection_ids: list[str]) -> bool | None:
        """True if another group member cannot see one of the collections.

        Returns None when the caller has nobody else to check against.
        """
        others: list[str] = []
        organized = next((r for r in self.list_active_rooms() if r.organizer_id == user_id), None)
        if organized is not None:
            others = [m for m in organized.members if m != user_id]
        elif self.playback is not None:
            group_ref = self.playback.group_of(user_id)
            if group_ref:
                others = [m for m in self.playback.members(group_ref) if m != user_id]

        if not others:
            return None

        for collection_id in collection_ids:
            if not self.directory.knows(collection_id):
                continue
            for member in others:
                if not self.directory.check_visibility(collection_id, member):
                    return True
        return False

    def play_winner(self, room_id: str, requester_id: str | None = None) -> tuple[Outcome, VotedItem | None]:
        room = self.get_room(room_id)
        if room is None:
            return Outcome.NOT_FOUND, None
        if requester_id is not None and requester_id != room.organizer_id:
            return Outcome.PRECONDITION_FAILED, None

        winner = self.get_results(room_id).winner
        if winner is None or not room.external_group_ref or self.playback is None:
            return Outcome.PRECONDITION_FAILED, winner

        try:
            self.playback.enqueue(room.external_group_ref, [winner.item_id])
        except PlaybackHandoffError:
            logger.warning("Could not hand off winner %s of room %s", winner.item_id, room_id)
            raise
        logger.info("Handed off winner %s of room %s to group %s", winner.item_id, room_id, room.external_group_ref)
        return Outcome.OK, winner


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def room_public_state(room: Room, now: datetime | None = None) -> dict:
    ends_at = room.voting_ends_at
    remaining = None
    if ends_at is not None and room.is_voting_active:
        remaining = max(0, int((ends_at - (now or utcnow())).total_seconds()))

    return {
        "id": room.id,
        "name": room.name,
        "externalGroupRef": room.external_group_ref,
        "organizerId": room.organizer_id,
        "members": list(room.members),
        "isActive": room.is_active,
        "isVotingActive": room.is_voting_active,
        "timeLimitMinutes": room.time_limit_minutes,
        "sortBy": room.sort_by.value,
        "selectedCollections": list(room.selected_collections),
        "selectedGenres": list(room.selected_genres),
        "maxParentalRating": room.max_parental_rating,
        "itemTypes": list(room.item_types),
        "createdAt": _iso(room.created_at),
        "votingStartedAt": _iso(room.voting_started_at),
        "votingEndsAt": _iso(ends_at),
        "remainingSec": remaining,
    }


def voted_item_payload(item: VotedItem) -> dict:
    return {
        "itemId": item.item_id,
        "voteCount": item.vote_count,
        "name": item.name,
        "year": item.year,
        "type": item.type,
    }


def results_payload(results: VotingResults) -> dict:
    winner = results.winner
    return {
        "roomId": results.room_id,
        "likedItems": [voted_item_payload(i) for i in results.liked_items],
        "winner": voted_item_payload(winner) if winner else None,
    }


def permissions_payload(permissions: UserPermissions) -> dict:
    return {
        "userId": permissions.user_id,
        "canOrganize": permissions.can_organize,
        "canVote": permissions.can_vote,
    }


def group_info_payload(info: GroupInfo) -> dict:
    return {
        "groupId": info.group_id,
        "isLeader": info.is_leader,
        "memberCount": info.member_count,
        "memberUserIds": list(info.member_user_ids),
    }
