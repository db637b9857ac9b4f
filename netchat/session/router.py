# netchat/session/router.py
"""
Single entry point for inbound events.

Each event kind maps to exactly one handler. Handlers run synchronously and
to completion, so no store ever sees another mutation half-done. Once the
session is terminated every further event is dropped.
"""
import asyncio
import logging
from typing import TYPE_CHECKING, Callable, Dict, Optional

from pydantic import ValidationError as PayloadError

from netchat.common.protocol import (
    CatalogList,
    InboundEvent,
    PMReceived,
    PresenceList,
    RoomHistory,
    RoomInfo,
    RoomMessage,
    SessionDuplicate,
    SessionReady,
    SessionRejected,
    TransportError,
    TypingStarted,
    TypingStopped,
    parse_inbound,
)
from netchat.session.connection import is_auth_failure

if TYPE_CHECKING:
    from netchat.session.context import SessionContext

log = logging.getLogger(__name__)


class EventRouter:
    def __init__(self, ctx: "SessionContext", on_change: Optional[Callable[[], None]] = None):
        self.ctx = ctx
        self._on_change = on_change
        self.dropped = 0
        self._handlers: Dict[type, Callable] = {
            SessionReady: self._session_ready,
            SessionRejected: self._session_rejected,
            CatalogList: self._catalog_list,
            RoomInfo: self._room_info,
            RoomHistory: self._room_history,
            RoomMessage: self._room_message,
            PresenceList: self._presence_list,
            TypingStarted: self._typing_started,
            TypingStopped: self._typing_stopped,
            PMReceived: self._pm_received,
            SessionDuplicate: self._session_duplicate,
            TransportError: self._transport_error,
        }

    # ============ Dispatch ============

    def dispatch(self, event: InboundEvent) -> None:
        if self.ctx.connection.terminal:
            self.dropped += 1
            log.debug("session terminated; dropping %s", event.type)
            return
        handler = self._handlers.get(type(event))
        if handler is None:
            self.dropped += 1
            log.warning("no handler for %r", event)
            return
        try:
            handler(event)
        finally:
            if self._on_change is not None:
                self._on_change()

    def dispatch_raw(self, obj: dict) -> None:
        try:
            event = parse_inbound(obj)
        except PayloadError as e:
            self.dropped += 1
            log.warning("dropping malformed event %r: %s", obj.get("type"), e.errors()[:1])
            return
        self.dispatch(event)

    async def run(self, channel: "asyncio.Queue[Optional[dict]]") -> None:
        """
        Consume raw frames until a None sentinel arrives. SessionTerminated
        raised by a handler propagates to the caller.
        """
        while True:
            obj = await channel.get()
            try:
                if obj is None:
                    return
                self.dispatch_raw(obj)
            finally:
                channel.task_done()

    # ============ Handlers ============

    def _session_ready(self, event: SessionReady) -> None:
        if event.username:
            self.ctx.typing.self_name = event.username
        self.ctx.connection.authenticated()

    def _session_rejected(self, event: SessionRejected) -> None:
        self.ctx.connection.handshake_failed(event.message)

    def _catalog_list(self, event: CatalogList) -> None:
        self.ctx.rooms.refresh_catalog(event.rooms)

    def _room_info(self, event: RoomInfo) -> None:
        self.ctx.rooms.apply_info(event.name, event.members, event.message_count)

    def _room_history(self, event: RoomHistory) -> None:
        self.ctx.rooms.load_history(event.room, event.messages)

    def _room_message(self, event: RoomMessage) -> None:
        self.ctx.rooms.apply_incoming_message(event.message(), event.room)

    def _presence_list(self, event: PresenceList) -> None:
        self.ctx.peers.replace(event.peers)

    def _typing_started(self, event: TypingStarted) -> None:
        self.ctx.typing.peer_started(event.peer, event.room, self.ctx.rooms.active_room)

    def _typing_stopped(self, event: TypingStopped) -> None:
        self.ctx.typing.peer_stopped(event.peer)

    def _pm_received(self, event: PMReceived) -> None:
        self.ctx.pm.append_received(event.sender, event.message())

    def _session_duplicate(self, event: SessionDuplicate) -> None:
        self.ctx.connection.preempted()

    def _transport_error(self, event: TransportError) -> None:
        log.error("transport error: %s", event.message)
        if is_auth_failure(event.message):
            self.ctx.connection.handshake_failed(event.message)
            return
        self.ctx.notifications.error(event.message or "Connection error")
