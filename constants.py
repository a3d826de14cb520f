import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3001))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

DEFAULT_USERNAME = os.getenv("DEFAULT_USERNAME", "Anonymous")

# 0 keeps every message
CHAT_HISTORY_LIMIT = int(os.getenv("CHAT_HISTORY_LIMIT", 500))

EVICT_EMPTY_ROOMS = os.getenv("EVICT_EMPTY_ROOMS", "true").lower() in ("1", "true", "yes")
STRICT_VIDEO_ACTIONS = os.getenv("STRICT_VIDEO_ACTIONS", "false").lower() in ("1", "true", "yes")

VIDEO_ACTIONS = ("play", "pause", "seek")
