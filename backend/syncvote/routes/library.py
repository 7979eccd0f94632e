from __future__ import annotations

from flask import Blueprint, jsonify, request

from ..library.models import PARENTAL_RATINGS
from ..utils.auth import require_user_id
from ._context import coordinator

bp = Blueprint("library", __name__)


@bp.get("/Library/Collections")
def get_collections():
    user_id = require_user_id(request)
    collections = coordinator().directory.list_collections(user_id)
    return jsonify([
        {"id": c.id, "name": c.name, "type": c.type, "itemCount": c.item_count}
        for c in collections
    ])


@bp.get("/Library/Genres")
def get_genres():
    user_id = require_user_id(request)
    return jsonify(coordinator().directory.list_genres(user_id))


@bp.get("/Library/ParentalRatings")
def get_parental_ratings():
    return jsonify([{"value": r.value, "name": r.name} for r in PARENTAL_RATINGS])
