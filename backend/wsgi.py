try:
    from backend.syncvote.server import create_app
except ImportError:  # pragma: no cover
    from syncvote.server import create_app

app, socketio = create_app()
