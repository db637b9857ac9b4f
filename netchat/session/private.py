# netchat/session/private.py
import logging
from typing import Dict, List, Optional

from netchat.common.protocol import PMMessage
from netchat.session.notifications import NotificationDispatcher
from netchat.storage.unread import UnreadCounterStore

log = logging.getLogger(__name__)


class PrivateMessageStore:
    """
    Per-peer PM threads in arrival order, plus which thread has focus.

    Opening a thread is the only thing that resets its unread counter; a PM
    arriving for any other thread is the only thing that increments one.
    """

    def __init__(self, counters: UnreadCounterStore, notifications: NotificationDispatcher):
        self._counters = counters
        self._notifications = notifications
        self._threads: Dict[str, List[PMMessage]] = {}
        self.focused_peer: Optional[str] = None

    def thread(self, peer: str) -> List[PMMessage]:
        return list(self._threads.get(peer, ()))

    def peers(self) -> List[str]:
        return list(self._threads)

    def open(self, peer: str) -> List[PMMessage]:
        self.focused_peer = peer
        self._counters.reset(peer)
        return self.thread(peer)

    def close(self) -> None:
        self.focused_peer = None

    def append_received(self, peer: str, msg: PMMessage) -> bool:
        """True when the thread is focused and the message shows immediately."""
        self._threads.setdefault(peer, []).append(msg)
        self._notifications.pm_arrived(peer, msg)
        if peer == self.focused_peer:
            return True
        count = self._counters.increment(peer)
        log.debug("unread PM from %s (%d)", peer, count)
        self._notifications.pm_unread(peer, msg)
        return False

    def append_sent(self, peer: str, msg: PMMessage) -> None:
        self._threads.setdefault(peer, []).append(msg)

    def unread(self, peer: str) -> int:
        return self._counters.get(peer)
