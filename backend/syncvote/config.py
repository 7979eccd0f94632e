import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Rooms
    DEFAULT_TIME_LIMIT_MIN = int(os.environ.get("DEFAULT_TIME_LIMIT_MIN", "5"))
    DEFAULT_SORT_BY = os.environ.get("DEFAULT_SORT_BY", "Random")
    MAX_ROOM_MEMBERS = int(os.environ.get("MAX_ROOM_MEMBERS", "10"))
    ROOM_TTL_MIN = int(os.environ.get("ROOM_TTL_MIN", "0"))
    SWEEP_INTERVAL_SEC = int(os.environ.get("SWEEP_INTERVAL_SEC", "60"))
    AUTO_PLAY_WINNER = os.environ.get("AUTO_PLAY_WINNER", "0") == "1"

    # Permissions (no external policy source yet)
    DEFAULT_CAN_ORGANIZE = os.environ.get("DEFAULT_CAN_ORGANIZE", "1") == "1"
    DEFAULT_CAN_VOTE = os.environ.get("DEFAULT_CAN_VOTE", "1") == "1"

    # Library
    LIBRARY_PATH = os.environ.get("LIBRARY_PATH", "")
    CANDIDATE_PAGE_LIMIT = int(os.environ.get("CANDIDATE_PAGE_LIMIT", "20"))
    CANDIDATE_MAX_LIMIT = int(os.environ.get("CANDIDATE_MAX_LIMIT", "100"))
