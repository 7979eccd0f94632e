from concurrent.futures import ThreadPoolExecutor
from threading import Barrier

from syncvote.voting.service import Outcome


def test_concurrent_duplicate_joins_admit_once(coordinator, room_spec):
    room = coordinator.create_room("owner", room_spec)
    workers = 16
    barrier = Barrier(workers)

    def join():
        barrier.wait()
        return coordinator.join_room(room.id, "guest")

    with ThreadPoolExecutor(max_workers=workers) as pool:
        outcomes = list(pool.map(lambda _: join(), range(workers)))

    assert outcomes.count(Outcome.OK) == 1
    assert room.members == ["owner", "guest"]


def test_concurrent_starts_succeed_once(coordinator, room_spec):
    room = coordinator.create_room("owner", room_spec)
    workers = 8
    barrier = Barrier(workers)

    def start():
        barrier.wait()
        return coordinator.start_voting(room.id, "owner")

    with ThreadPoolExecutor(max_workers=workers) as pool:
        outcomes = list(pool.map(lambda _: start(), range(workers)))

    assert outcomes.count(Outcome.OK) == 1


def test_concurrent_revotes_leave_one_vote(coordinator, registry, voting_room):
    workers = 16
    barrier = Barrier(workers)

    def vote(n):
        barrier.wait()
        return coordinator.cast_vote(voting_room.id, "guest", "item1", n % 2 == 0)

    with ThreadPoolExecutor(max_workers=workers) as pool:
        outcomes = list(pool.map(vote, range(workers)))

    assert all(outcomes)
    assert len(registry.votes_for_room(voting_room.id)) == 1


def test_many_members_voting_at_once(coordinator, voting_room):
    users = [f"user{n}" for n in range(20)]
    for user in users:
        coordinator.join_room(voting_room.id, user)

    with ThreadPoolExecutor(max_workers=10) as pool:
        list(pool.map(lambda u: coordinator.cast_vote(voting_room.id, u, "item2", True), users))

    winner = coordinator.get_results(voting_room.id).winner
    assert winner.item_id == "item2"
    assert winner.vote_count == 20
