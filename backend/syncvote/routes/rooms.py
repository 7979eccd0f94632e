from __future__ import annotations

from typing import Any

from flask import Blueprint, current_app, jsonify, request

from ..errors import InvalidPayload
from ..utils.auth import require_user_id
from ..voting.models import RoomSpec, SortBy
from ..voting.service import results_payload, room_public_state
from ._context import coordinator, notify_room, outcome_status

bp = Blueprint("rooms", __name__)


def _str_list(data: dict, key: str) -> list[str]:
    raw: Any = data.get(key)
    if raw is None:
        return []
    if not isinstance(raw, list) or not all(isinstance(v, str) for v in raw):
        raise InvalidPayload(f"invalid_{key}")
    return raw


def _optional_int(data: dict, key: str, default: int | None = None) -> int | None:
    raw: Any = data.get(key)
    if raw is None:
        return default
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise InvalidPayload(f"invalid_{key}")
    return raw


def parse_room_spec(data: dict) -> RoomSpec:
    name = data.get("name", "")
    if not isinstance(name, str):
        raise InvalidPayload("invalid_name")

    group_ref = data.get("externalGroupRef")
    if group_ref is not None and not isinstance(group_ref, str):
        raise InvalidPayload("invalid_externalGroupRef")

    if "sortBy" in data:
        sort_by = SortBy.parse(data["sortBy"]).value
    else:
        sort_by = current_app.config["DEFAULT_SORT_BY"]

    spec = RoomSpec(
        name=name.strip(),
        external_group_ref=(group_ref or "").strip() or None,
        time_limit_minutes=_optional_int(data, "timeLimit", current_app.config["DEFAULT_TIME_LIMIT_MIN"]),
        sort_by=sort_by,
        selected_collections=_str_list(data, "selectedCollections"),
        selected_genres=_str_list(data, "selectedGenres"),
        max_parental_rating=_optional_int(data, "maxParentalRating"),
    )
    if "itemTypes" in data:
        spec.item_types = _str_list(data, "itemTypes")
    return spec


@bp.post("/Room")
def create_room():
    user_id = require_user_id(request)
    if not coordinator().get_user_permissions(user_id).can_organize:
        return jsonify({"error": "forbidden"}), 403

    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidPayload()

    room = coordinator().create_room(user_id, parse_room_spec(data))
    return jsonify(room_public_state(room))


@bp.get("/Rooms")
def list_rooms():
    rooms = coordinator().list_active_rooms()
    return jsonify([room_public_state(r) for r in rooms])


@bp.get("/Room/<room_id>")
def get_room(room_id: str):
    room = coordinator().get_room(room_id)
    if not room:
        return jsonify({"error": "room_not_found"}), 404
    return jsonify(room_public_state(room))


@bp.post("/Room/<room_id>/Join")
def join_room(room_id: str):
    user_id = require_user_id(request)
    outcome = coordinator().join_room(room_id, user_id)
    if not outcome:
        return jsonify({"error": "unable_to_join"}), outcome_status(outcome)
    notify_room(room_id)
    return jsonify({"ok": True})


@bp.post("/Room/<room_id>/StartVoting")
def start_voting(room_id: str):
    user_id = require_user_id(request)
    outcome = coordinator().start_voting(room_id, user_id)
    if not outcome:
        return jsonify({"error": "unable_to_start_voting"}), outcome_status(outcome)
    notify_room(room_id)
    return jsonify({"ok": True})


@bp.post("/Room/<room_id>/Close")
def close_room(room_id: str):
    user_id = require_user_id(request)
    outcome = coordinator().close_room(room_id, user_id)
    if not outcome:
        return jsonify({"error": "unable_to_close"}), outcome_status(outcome)
    notify_room(room_id, with_results=True)
    return jsonify({"ok": True})


@bp.get("/Room/<room_id>/Results")
def get_results(room_id: str):
    return jsonify(results_payload(coordinator().get_results(room_id)))


@bp.get("/Room/<room_id>/Candidates")
def get_candidates(room_id: str):
    user_id = require_user_id(request)
    room = coordinator().get_room(room_id)
    if not room:
        return jsonify({"error": "room_not_found"}), 404

    try:
        skip = max(0, int(request.args.get("skip", "0")))
        limit = int(request.args.get("limit", str(current_app.config["CANDIDATE_PAGE_LIMIT"])))
    except ValueError:
        raise InvalidPayload("invalid_pagination")
    limit = max(0, min(limit, current_app.config["CANDIDATE_MAX_LIMIT"]))

    items, total = coordinator().candidates(room, user_id, skip, limit)
    return jsonify({
        "items": [
            {
                "id": i.id,
                "name": i.name,
                "type": i.type,
                "year": i.year,
                "genres": list(i.genres),
                "communityRating": i.community_rating,
                "officialRating": i.official_rating,
                "overview": i.overview,
                "runTimeTicks": i.run_time_ticks,
            }
            for i in items
        ],
        "totalCount": total,
        "startIndex": skip,
    })
