from __future__ import annotations

from flask import Blueprint, jsonify, request

from ..errors import InvalidPayload
from ..utils.auth import require_user_id
from ..voting.service import Outcome, group_info_payload, voted_item_payload
from ._context import coordinator

bp = Blueprint("playback", __name__)


@bp.get("/SyncPlayInfo")
def sync_play_info():
    user_id = require_user_id(request)
    return jsonify(group_info_payload(coordinator().group_info(user_id)))


@bp.post("/CheckAccess")
def check_access():
    user_id = require_user_id(request)
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise InvalidPayload()
    ids = data.get("collectionIds") or []
    if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
        raise InvalidPayload("invalid_collectionIds")

    issues = coordinator().has_access_issues(user_id, ids)
    if issues is None:
        return jsonify({"hasAccessIssues": False, "message": "No other members in group"})
    return jsonify({
        "hasAccessIssues": issues,
        "message": (
            "Some group members may not have access to all selected content"
            if issues else "All members have access"
        ),
    })


@bp.post("/Room/<room_id>/PlayWinner")
def play_winner(room_id: str):
    user_id = require_user_id(request)
    room = coordinator().get_room(room_id)
    if not room:
        return jsonify({"error": "room_not_found"}), 404
    if room.organizer_id != user_id:
        return jsonify({"error": "only_organizer"}), 403

    outcome, winner = coordinator().play_winner(room_id, user_id)
    if outcome is Outcome.NOT_FOUND:
        return jsonify({"error": "room_not_found"}), 404
    if not outcome:
        error = "no_winner" if winner is None else "no_playback_group"
        return jsonify({"error": error}), 400
    return jsonify({"ok": True, "winner": voted_item_payload(winner)})
