# netchat/session/rooms.py
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set

from netchat.common.protocol import (
    Message,
    OutboundEvent,
    Room,
    RoomHistoryGet,
    RoomJoin,
    RoomLeave,
)
from netchat.session.typing import TypingCoordinator

log = logging.getLogger(__name__)


@dataclass
class RoomSession:
    active_room: Optional[str] = None
    history: List[Message] = field(default_factory=list)
    members: Set[str] = field(default_factory=set)
    message_count: int = 0
    loading: bool = False


class RoomStore:
    """Room catalog plus the single active room and its cached history."""

    def __init__(self, emit: Callable[[OutboundEvent], None], typing: TypingCoordinator):
        self._emit = emit
        self._typing = typing
        self.catalog: List[Room] = []
        self.session = RoomSession()

    @property
    def active_room(self) -> Optional[str]:
        return self.session.active_room

    @property
    def input_enabled(self) -> bool:
        return self.session.active_room is not None

    def refresh_catalog(self, rooms: List[Room]) -> None:
        self.catalog = list(rooms)

    def join(self, name: str) -> bool:
        """Returns False when `name` is already the active room."""
        if name == self.session.active_room:
            return False
        self._typing.cancel()
        self._typing.clear()
        self.session = RoomSession(active_room=name, loading=True)
        self._emit(RoomJoin(name=name))
        self._emit(RoomHistoryGet(room=name))
        log.info("joined room %s", name)
        return True

    def leave(self) -> bool:
        if self.session.active_room is None:
            return False
        name = self.session.active_room
        self._typing.cancel()
        self._typing.clear()
        self.session = RoomSession()
        self._emit(RoomLeave())
        log.info("left room %s", name)
        return True

    def apply_info(self, name: str, members: List[str], message_count: int) -> None:
        if name != self.session.active_room:
            log.debug("room:info for inactive room %s dropped", name)
            return
        self.session.members = set(members)
        self.session.message_count = message_count

    def load_history(self, room: str, messages: List[Message]) -> None:
        if room != self.session.active_room:
            log.debug("room:history for inactive room %s dropped", room)
            return
        self.session.history = list(messages)
        self.session.loading = False

    def apply_incoming_message(self, msg: Message, room: Optional[str] = None) -> bool:
        if msg.author_name:
            self._typing.peer_stopped(msg.author_name)
        active = self.session.active_room
        if active is None or (room is not None and room != active):
            return False
        self.session.history.append(msg)
        return True
