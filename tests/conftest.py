import os
from datetime import date, datetime, timedelta, timezone

import pytest

os.environ.setdefault("SOCKETIO_ASYNC_MODE", "threading")


class FakeClock:
    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, 20, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


# ============================================================================
# Collaborator Fixtures
# ============================================================================


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def directory():
    from syncvote.library.directory import InMemoryItemDirectory
    from syncvote.library.models import Collection, MediaItem

    collections = [
        Collection(id="col-movies", name="Movies", type="movies"),
        Collection(id="col-kids", name="Kids", type="movies"),
        Collection(id="col-private", name="Private", type="boxset", allowed_users={"owner"}),
    ]
    items = [
        MediaItem(
            id="item1", name="Alien", year=1979, genres=["Horror", "Sci-Fi"],
            collection_ids=["col-movies"], community_rating=8.5, parental_rating=16,
            premiere_date=date(1979, 5, 25),
        ),
        MediaItem(
            id="item2", name="brave", year=2012, genres=["Animation"],
            collection_ids=["col-kids"], community_rating=7.1, parental_rating=6,
            premiere_date=date(2012, 6, 22),
        ),
        MediaItem(
            id="item3", name="Coco", year=2017, genres=["Animation", "Family"],
            collection_ids=["col-kids", "col-movies"], community_rating=8.4, parental_rating=1,
            premiere_date=date(2017, 11, 22),
        ),
        MediaItem(
            id="item4", name="Dune", year=2021, genres=["Sci-Fi"],
            collection_ids=["col-movies"], parental_rating=None,
        ),
        MediaItem(
            id="show1", name="Severance", type="Series", year=2022, genres=["Drama"],
            collection_ids=["col-movies"], community_rating=8.7, parental_rating=16,
        ),
        MediaItem(
            id="secret", name="Home Video", year=2020, genres=["Family"],
            collection_ids=["col-private"], allowed_users={"owner"},
        ),
    ]
    return InMemoryItemDirectory(items=items, collections=collections)


@pytest.fixture
def playback():
    from syncvote.playback.groups import InMemoryPlaybackGroups

    return InMemoryPlaybackGroups()


# ============================================================================
# Engine Fixtures
# ============================================================================


@pytest.fixture
def registry():
    from syncvote.voting.registry import RoomRegistry

    return RoomRegistry()


@pytest.fixture
def coordinator(registry, directory, playback, clock):
    from syncvote.voting.service import VotingCoordinator

    return VotingCoordinator(registry, directory, playback, clock=clock)


@pytest.fixture
def room_spec():
    from syncvote.voting.models import RoomSpec

    return RoomSpec(name="Friday night", external_group_ref="group-1", time_limit_minutes=10)


@pytest.fixture
def voting_room(coordinator, room_spec):
    """A room organized by "owner" with "guest" joined and voting started."""
    room = coordinator.create_room("owner", room_spec)
    coordinator.join_room(room.id, "guest")
    coordinator.start_voting(room.id, "owner")
    return room


# ============================================================================
# HTTP Fixtures
# ============================================================================


@pytest.fixture
def app_and_socketio(directory, playback):
    from syncvote.server import create_app

    return create_app(
        {"TESTING": True, "TRUST_PROXY_HEADERS": False, "MAX_ROOM_MEMBERS": 10},
        directory=directory,
        playback=playback,
    )


@pytest.fixture
def app(app_and_socketio):
    return app_and_socketio[0]


@pytest.fixture
def socketio(app_and_socketio):
    return app_and_socketio[1]


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def as_user():
    def _headers(user_id: str) -> dict:
        return {"X-SyncVote-User": user_id}

    return _headers
