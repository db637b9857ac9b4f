# netchat/common/config.py
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


TYPING_IDLE_SECONDS = 3.0
CATALOG_REFRESH_SECONDS = 5.0
MIN_PASSWORD_LENGTH = 4
MAX_IMAGE_BYTES = 5 * 1024 * 1024
ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp")
NOTICE_SECONDS = 6.0


class Settings(BaseModel):
    host: str = "127.0.0.1"
    port: int = 5000
    api_url: str = "http://127.0.0.1:3000"
    state_dir: Path = Path.home() / ".netchat"
    http_timeout: float = 10.0
    log_level: str = "INFO"


def load_settings() -> Settings:
    return Settings(
        host=os.getenv("NETCHAT_HOST", "127.0.0.1"),
        port=int(os.getenv("NETCHAT_PORT", "5000")),
        api_url=os.getenv("NETCHAT_API_URL", "http://127.0.0.1:3000").rstrip("/"),
        state_dir=Path(os.getenv("NETCHAT_STATE_DIR", "~/.netchat")).expanduser(),
        http_timeout=float(os.getenv("NETCHAT_HTTP_TIMEOUT", "10")),
        log_level=os.getenv("NETCHAT_LOG_LEVEL", "INFO").upper(),
    )
