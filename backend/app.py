import os

import sys

from pathlib import Path

from dotenv import load_dotenv


def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip() == "1"


def _wants_eventlet() -> bool:
    mode = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()
    if mode:
        return mode == "eventlet"
    return not sys.platform.startswith("win") and sys.version_info < (3, 13)


def main() -> None:
    load_dotenv(Path(__file__).resolve().parents[1] / ".env")

    # Must happen before flask/socketio import any networking modules.
    if _wants_eventlet():
        import eventlet

        eventlet.monkey_patch()

    try:
        from backend.syncvote.server import create_app
    except ImportError:  # pragma: no cover
        from syncvote.server import create_app

    app, socketio = create_app()

    socketio.run(
        app,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "5000")),
        debug=_flag("FLASK_DEBUG", "0"),
        allow_unsafe_werkzeug=_flag("ALLOW_UNSAFE_WERKZEUG", "1"),
        use_reloader=_flag("FLASK_USE_RELOADER", "0"),
    )


if __name__ == "__main__":
    main()
