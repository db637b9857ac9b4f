# netchat/storage/local.py
"""
Client-local key/value storage backed by one JSON file.

Each key holds a JSON-serialisable value. Reads never raise on a missing
or malformed file; writes go through a temp file and an atomic rename.
"""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

log = logging.getLogger(__name__)

STORAGE_FILE = "local_storage.json"


class LocalStorage:
    def __init__(self, state_dir: Path):
        self.path = Path(state_dir).expanduser() / STORAGE_FILE

    def _read_all(self) -> Dict[str, Any]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, ValueError, OSError) as e:
            log.warning("ignoring unreadable storage file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            return {}
        return data

    def _write_all(self, payload: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(json.dumps(payload, indent=2, sort_keys=True))
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, self.path)

    def get(self, key: str) -> Optional[Any]:
        return self._read_all().get(key)

    def set(self, key: str, value: Any) -> None:
        payload = self._read_all()
        payload[key] = value
        self._write_all(payload)

    def remove(self, key: str) -> None:
        payload = self._read_all()
        if key in payload:
            del payload[key]
            self._write_all(payload)
