# netchat/session/typing.py
import logging
from typing import Callable, List, Optional

from netchat.common.config import TYPING_IDLE_SECONDS
from netchat.common.protocol import OutboundEvent, TypingSignal
from netchat.session.timers import CancelableTimer, Scheduler

log = logging.getLogger(__name__)


class TypingCoordinator:
    """
    Send side: debounced typing:start / typing:stop for the local user.
    Receive side: ordered set of peers currently typing in the active room.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        emit: Callable[[OutboundEvent], None],
        self_name: Optional[str] = None,
        idle_seconds: float = TYPING_IDLE_SECONDS,
    ):
        self._emit = emit
        self.self_name = self_name
        self._stop_timer = CancelableTimer(scheduler, idle_seconds, self._idle)
        self._typing: List[str] = []

    # ============ Send side ============

    def input_changed(self, room_active: bool) -> None:
        if not room_active:
            return
        self._emit(TypingSignal(type="typing:start"))
        self._stop_timer.arm()

    def submitted(self) -> None:
        self._stop_timer.cancel()
        self._emit(TypingSignal(type="typing:stop"))

    def cancel(self) -> None:
        self._stop_timer.cancel()

    def _idle(self) -> None:
        self._emit(TypingSignal(type="typing:stop"))

    # ============ Receive side ============

    @property
    def peers(self) -> List[str]:
        return list(self._typing)

    def peer_started(self, peer: str, room: Optional[str], active_room: Optional[str]) -> bool:
        if peer == self.self_name or room is None or room != active_room:
            return False
        if peer in self._typing:
            return False
        self._typing.append(peer)
        return True

    def peer_stopped(self, peer: str) -> None:
        if peer in self._typing:
            self._typing.remove(peer)

    def clear(self) -> None:
        self._typing.clear()

    def indicator(self) -> Optional[str]:
        peers = self._typing
        if not peers:
            return None
        if len(peers) == 1:
            return f"{peers[0]} is typing…"
        if len(peers) == 2:
            return f"{peers[0]} and {peers[1]} are typing…"
        return f"{len(peers)} users are typing…"
