from __future__ import annotations

from flask import Blueprint, jsonify, request

from ..errors import InvalidPayload
from ..utils.auth import get_user_id, require_user_id
from ..voting.service import permissions_payload
from ._context import coordinator, notify_room, outcome_status

bp = Blueprint("votes", __name__)


@bp.post("/Vote")
def cast_vote():
    user_id = require_user_id(request)
    if not coordinator().get_user_permissions(user_id).can_vote:
        return jsonify({"error": "forbidden"}), 403

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidPayload()
    room_id = data.get("roomId")
    item_id = data.get("itemId")
    is_like = data.get("isLike", False)
    if not isinstance(room_id, str) or not room_id.strip():
        raise InvalidPayload("invalid_roomId")
    if not isinstance(item_id, str) or not item_id.strip():
        raise InvalidPayload("invalid_itemId")
    if not isinstance(is_like, bool):
        raise InvalidPayload("invalid_isLike")

    room_id = room_id.strip()
    outcome = coordinator().cast_vote(room_id, user_id, item_id.strip(), is_like)
    if not outcome:
        return jsonify({"error": "unable_to_cast_vote"}), outcome_status(outcome)
    notify_room(room_id, with_results=True)
    return jsonify({"ok": True})


@bp.get("/Permissions")
def get_permissions():
    # ?userId= takes precedence over the caller's own id here.
    target = (request.args.get("userId") or "").strip() or get_user_id(request)
    if not target:
        return jsonify({"error": "unauthenticated"}), 401
    return jsonify(permissions_payload(coordinator().get_user_permissions(target)))
