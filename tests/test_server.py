import json

from flask import Flask, request

from syncvote.library.directory import InMemoryItemDirectory
from syncvote.server import create_app
from syncvote.utils.auth import get_user_id


def test_app_wires_coordinator_from_config(tmp_path):
    catalog = tmp_path / "catalog.json"
    catalog.write_text(json.dumps({"items": [{"id": "m1", "name": "Heat"}]}))

    app, _ = create_app({
        "TESTING": True,
        "LIBRARY_PATH": str(catalog),
        "MAX_ROOM_MEMBERS": 3,
        "DEFAULT_SORT_BY": "Title",
        "DEFAULT_CAN_VOTE": False,
    })
    coordinator = app.extensions["syncvote"]

    assert isinstance(coordinator.directory, InMemoryItemDirectory)
    assert coordinator.directory.resolve("m1").name == "Heat"
    assert coordinator.max_members == 3
    assert coordinator.get_user_permissions("u").can_vote is False


def test_default_sort_only_applies_when_omitted():
    app, _ = create_app({"TESTING": True, "LIBRARY_PATH": "", "DEFAULT_SORT_BY": "Title"})
    client = app.test_client()
    headers = {"X-SyncVote-User": "owner"}

    omitted = client.post("/api/Room", json={"name": "a"}, headers=headers).get_json()
    assert omitted["sortBy"] == "Title"

    for raw in ("garbage", 42, None):
        room = client.post("/api/Room", json={"name": "b", "sortBy": raw}, headers=headers).get_json()
        assert room["sortBy"] == "Random"


def test_empty_library_by_default():
    app, _ = create_app({"TESTING": True, "LIBRARY_PATH": ""})
    assert app.extensions["syncvote"].directory.list_genres(None) == []


def test_cors_headers_on_api(client):
    resp = client.get("/api/health", headers={"Origin": "http://example.com"})
    assert resp.headers.get("Access-Control-Allow-Origin") in ("*", "http://example.com")


def test_user_id_resolution_order():
    app = Flask(__name__)

    with app.test_request_context("/?userId=query", headers={"X-User-Id": "fallback"}):
        assert get_user_id(request) == "fallback"

    with app.test_request_context("/?userId=query", headers={"X-SyncVote-User": " primary "}):
        assert get_user_id(request) == "primary"

    with app.test_request_context("/?userId=query"):
        assert get_user_id(request) == "query"

    with app.test_request_context("/"):
        assert get_user_id(request) is None
