from __future__ import annotations

import logging
import os
import sys

from flask import Flask, jsonify
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .errors import InvalidPayload, PlaybackHandoffError, Unauthenticated
from .library.directory import InMemoryItemDirectory, ItemDirectory, load_catalog
from .playback.groups import InMemoryPlaybackGroups, PlaybackGroups
from .realtime.handlers import register_socketio_handlers, start_expiry_sweep
from .routes.health import bp as health_bp
from .routes.library import bp as library_bp
from .routes.playback import bp as playback_bp
from .routes.rooms import bp as rooms_bp
from .routes.votes import bp as votes_bp
from .voting.registry import RoomRegistry
from .voting.service import VotingCoordinator

logger = logging.getLogger(__name__)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(InvalidPayload)
    def invalid_payload(exc: InvalidPayload):
        return jsonify({"error": exc.code}), 400

    @app.errorhandler(Unauthenticated)
    def unauthenticated(exc: Unauthenticated):
        return jsonify({"error": "unauthenticated"}), 401

    @app.errorhandler(PlaybackHandoffError)
    def playback_failed(exc: PlaybackHandoffError):
        return jsonify({"error": "playback_handoff_failed"}), 502


def create_app(
    config_overrides: dict | None = None,
    directory: ItemDirectory | None = None,
    playback: PlaybackGroups | None = None,
) -> tuple[Flask, SocketIO]:
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    env_async_mode = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()
    if env_async_mode:
        async_mode = env_async_mode
    else:
        # eventlet is unreliable on Windows and on Python >= 3.13
        if sys.platform.startswith("win") or sys.version_info >= (3, 13):
            async_mode = "threading"
        else:
            async_mode = "eventlet"

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=async_mode,
    )

    if directory is None:
        library_path = app.config.get("LIBRARY_PATH", "")
        directory = load_catalog(library_path) if library_path else InMemoryItemDirectory()
    if playback is None:
        playback = InMemoryPlaybackGroups()

    coordinator = VotingCoordinator(
        RoomRegistry(),
        directory,
        playback,
        max_members=app.config["MAX_ROOM_MEMBERS"],
        default_can_organize=app.config["DEFAULT_CAN_ORGANIZE"],
        default_can_vote=app.config["DEFAULT_CAN_VOTE"],
    )
    app.extensions["syncvote"] = coordinator

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")
    app.register_blueprint(votes_bp, url_prefix="/api")
    app.register_blueprint(library_bp, url_prefix="/api")
    app.register_blueprint(playback_bp, url_prefix="/api")
    _register_error_handlers(app)

    app.extensions["syncvote.notifier"] = register_socketio_handlers(
        socketio,
        coordinator,
        auto_play_winner=app.config["AUTO_PLAY_WINNER"],
    )

    if app.config["ROOM_TTL_MIN"] > 0:
        start_expiry_sweep(socketio, coordinator, app.config["ROOM_TTL_MIN"], app.config["SWEEP_INTERVAL_SEC"])

    logger.info("SyncVote started (async_mode=%s)", async_mode)
    return app, socketio
