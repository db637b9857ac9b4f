# netchat/storage/unread.py
"""
Persisted unread-PM counters, one non-negative int per peer name.

Only the event router (on a PM for an unfocused thread) increments, and
only opening a thread resets. Every mutation is written through.
"""
import logging
from typing import Dict

from netchat.storage.local import LocalStorage

log = logging.getLogger(__name__)

UNREAD_KEY = "netchat_unread"


class UnreadCounterStore:
    def __init__(self, storage: LocalStorage):
        self._storage = storage
        self._counts: Dict[str, int] = {}

    def load(self) -> Dict[str, int]:
        raw = self._storage.get(UNREAD_KEY)
        counts: Dict[str, int] = {}
        if isinstance(raw, dict):
            for peer, value in raw.items():
                try:
                    n = int(value)
                except (TypeError, ValueError):
                    continue
                if n > 0:
                    counts[str(peer)] = n
        self._counts = counts
        return dict(self._counts)

    def persist(self) -> None:
        try:
            self._storage.set(UNREAD_KEY, dict(self._counts))
        except OSError as e:
            log.warning("could not persist unread counters: %s", e)

    def increment(self, peer: str) -> int:
        self._counts[peer] = self._counts.get(peer, 0) + 1
        self.persist()
        return self._counts[peer]

    def reset(self, peer: str) -> None:
        if self._counts.get(peer):
            self._counts[peer] = 0
            self.persist()

    def get(self, peer: str) -> int:
        return self._counts.get(peer, 0)

    def snapshot(self) -> Dict[str, int]:
        return dict(self._counts)
