from datetime import datetime, timedelta, timezone

import pytest

from syncvote.voting.models import Room, SortBy, Vote, VotingResults, VotedItem


class TestSortBy:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Title", SortBy.TITLE),
            ("communityrating", SortBy.COMMUNITY_RATING),
            ("  PremiereDate ", SortBy.PREMIERE_DATE),
            ("random", SortBy.RANDOM),
        ],
    )
    def test_parse_is_case_insensitive(self, raw, expected):
        assert SortBy.parse(raw) is expected

    @pytest.mark.parametrize("raw", ["", "Popularity", None, 3])
    def test_unparsable_falls_back_to_random(self, raw):
        assert SortBy.parse(raw) is SortBy.RANDOM

    def test_members_pass_through(self):
        assert SortBy.parse(SortBy.PREMIERE_DATE) is SortBy.PREMIERE_DATE


class TestRoom:
    def test_organizer_is_first_member(self):
        room = Room(organizer_id="owner")
        assert room.members == ["owner"]

    @pytest.mark.parametrize("raw,expected", [(0, 1), (-5, 1), (1000, 120), (45, 45), (120, 120)])
    def test_time_limit_is_clamped(self, raw, expected):
        assert Room(organizer_id="o", time_limit_minutes=raw).time_limit_minutes == expected

    def test_set_time_limit_clamps_later_assignments(self):
        room = Room(organizer_id="o")
        room.set_time_limit(500)
        assert room.time_limit_minutes == 120

    def test_item_types_fall_back_to_movie(self):
        room = Room(organizer_id="o", item_types=[])
        assert room.item_types == ["Movie"]
        room.set_item_types(["  ", ""])
        assert room.item_types == ["Movie"]

    def test_blank_genres_are_dropped(self):
        room = Room(organizer_id="o", selected_genres=["Drama", " ", "", "Drama", "Comedy"])
        assert room.selected_genres == ["Drama", "Comedy"]

    def test_add_member_rejects_duplicates(self):
        room = Room(organizer_id="o")
        assert room.add_member("u") is True
        assert room.add_member("u") is False
        assert room.members == ["o", "u"]

    def test_voting_ends_at_is_derived_from_start(self):
        room = Room(organizer_id="o", time_limit_minutes=15)
        assert room.voting_ends_at is None

        started = datetime(2024, 1, 1, tzinfo=timezone.utc)
        room.voting_started_at = started
        assert room.voting_ends_at == started + timedelta(minutes=15)


def test_vote_key_identifies_room_user_item():
    vote = Vote(room_id="r", user_id="u", item_id="i", is_like=True)
    assert vote.key == ("r", "u", "i")


def test_results_winner_is_first_item():
    assert VotingResults(room_id="r").winner is None

    first = VotedItem(item_id="a", vote_count=2)
    results = VotingResults(room_id="r", liked_items=[first, VotedItem(item_id="b", vote_count=1)])
    assert results.winner is first
