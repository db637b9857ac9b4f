# netchat/common/utils.py
import base64
from datetime import datetime, timezone


PREVIEW_LIMIT = 50


def b64encode(b: bytes) -> str:
    return base64.b64encode(b).decode("utf-8")


def b64decode(s: str) -> bytes:
    return base64.b64decode(s.encode("utf-8"))


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def preview(text: str, limit: int = PREVIEW_LIMIT) -> str:
    """First `limit` characters of text, with '...' appended if it was longer."""
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def cap(text: str, limit: int) -> str:
    if len(text) > limit:
        return text[: limit - 1] + "…"
    return text
