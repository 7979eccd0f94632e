from __future__ import annotations

import logging
from datetime import timedelta
from threading import Lock
from typing import Callable

from flask_socketio import SocketIO, emit, join_room, leave_room

from ..errors import PlaybackHandoffError
from ..voting.service import VotingCoordinator, results_payload, room_public_state
from . import events

logger = logging.getLogger(__name__)

Notifier = Callable[[str, bool], None]


def register_socketio_handlers(
    socketio: SocketIO,
    coordinator: VotingCoordinator,
    auto_play_winner: bool = False,
    tick_interval_sec: float = 0.25,
) -> Notifier:
    """Wire socket events and return the callback HTTP routes use to push updates."""
    room_tasks: dict[str, bool] = {}
    ended_rooms: set[str] = set()
    tasks_lock = Lock()

    def _broadcast_room_state(room_id: str) -> None:
        room = coordinator.get_room(room_id)
        if not room:
            socketio.emit(events.ROOM_ERROR, {"error": "room_not_found"}, to=room_id)
            return
        socketio.emit(events.ROOM_STATE, room_public_state(room, coordinator.clock()), to=room_id)

    def _broadcast_results(room_id: str) -> None:
        socketio.emit(events.ROOM_RESULTS, results_payload(coordinator.get_results(room_id)), to=room_id)

    def _finish_voting(room_id: str) -> None:
        with tasks_lock:
            if room_id in ended_rooms:
                return
            ended_rooms.add(room_id)

        results = coordinator.get_results(room_id)
        if auto_play_winner and results.winner is not None:
            try:
                coordinator.play_winner(room_id)
            except PlaybackHandoffError as exc:
                logger.warning("Auto play of room %s failed: %s", room_id, exc)
        socketio.emit(events.VOTING_ENDED, results_payload(results), to=room_id)

    def _ensure_room_task(room_id: str) -> None:
        with tasks_lock:
            if room_tasks.get(room_id) or room_id in ended_rooms:
                return
            room_tasks[room_id] = True

        def _runner() -> None:
            last_sent = None
            while True:
                room = coordinator.get_room(room_id)
                if not room or not room.is_active or not room.is_voting_active:
                    break

                ends_at = room.voting_ends_at
                if ends_at is None:
                    break

                now = coordinator.clock()
                if now >= ends_at:
                    _finish_voting(room_id)
                    break

                remaining = int((ends_at - now).total_seconds())
                if remaining != last_sent:
                    last_sent = remaining
                    socketio.emit(events.VOTING_TICK, {"roomId": room_id, "remainingSec": remaining}, to=room_id)

                socketio.sleep(tick_interval_sec)

            with tasks_lock:
                room_tasks.pop(room_id, None)

        socketio.start_background_task(_runner)

    def notify(room_id: str, with_results: bool = False) -> None:
        _broadcast_room_state(room_id)
        if with_results:
            _broadcast_results(room_id)
        room = coordinator.get_room(room_id)
        if room and not room.is_active:
            with tasks_lock:
                ended_rooms.discard(room_id)
        elif room and room.is_voting_active:
            _ensure_room_task(room_id)

    @socketio.on(events.ROOM_SUBSCRIBE)
    def room_subscribe(data):
        payload = data or {}
        room_id = str(payload.get("roomId", "")).strip()
        if not room_id:
            emit(events.ROOM_ERROR, {"error": "invalid_room"})
            return {"ok": False, "error": "invalid_room"}

        room = coordinator.get_room(room_id)
        if not room:
            emit(events.ROOM_ERROR, {"error": "room_not_found"})
            return {"ok": False, "error": "room_not_found"}

        join_room(room_id)
        emit(events.ROOM_STATE, room_public_state(room, coordinator.clock()))
        if room.is_voting_active:
            _ensure_room_task(room_id)
        return {"ok": True}

    @socketio.on(events.ROOM_UNSUBSCRIBE)
    def room_unsubscribe(data):
        room_id = str((data or {}).get("roomId", "")).strip()
        if room_id:
            leave_room(room_id)
        return {"ok": True}

    return notify


def start_expiry_sweep(socketio: SocketIO, coordinator: VotingCoordinator, ttl_min: int, interval_sec: int) -> None:
    ttl = timedelta(minutes=ttl_min)

    def _sweeper() -> None:
        while True:
            socketio.sleep(interval_sec)
            coordinator.sweep_expired_rooms(ttl)

    socketio.start_background_task(_sweeper)
