# netchat/session/connection.py
"""
Connect/auth lifecycle.

    DISCONNECTED -> CONNECTING -> AUTHENTICATED -> DISCONNECTED | PREEMPTED

A credential failure during the handshake and a duplicate-session notice
are both terminal: credentials are wiped, the transport is closed and the
session object is never reconnected.
"""
import enum
import logging
from typing import Callable, Optional

from netchat.common.config import CATALOG_REFRESH_SECONDS
from netchat.common.errors import AuthError, DuplicatePreemptionError
from netchat.common.protocol import CatalogGet, OutboundEvent
from netchat.session.timers import PeriodicTask, Scheduler
from netchat.storage.credentials import CredentialStore

log = logging.getLogger(__name__)

AUTH_FAILURE_MESSAGES = frozenset({"Authentication failed", "Invalid token"})
DUPLICATE_NOTICE = (
    "⚠️ Your account is already logged in from another location. "
    "You will be disconnected."
)


class ConnectionState(enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    AUTHENTICATED = "authenticated"
    PREEMPTED = "preempted"


def is_auth_failure(reason: str) -> bool:
    return reason in AUTH_FAILURE_MESSAGES


class ConnectionSessionManager:
    def __init__(
        self,
        scheduler: Scheduler,
        credentials: CredentialStore,
        emit: Callable[[OutboundEvent], None],
        close_transport: Callable[[], None],
        alert: Callable[[str], None],
        redirect: Callable[[], None],
        refresh_interval: float = CATALOG_REFRESH_SECONDS,
    ):
        self._credentials = credentials
        self._emit = emit
        self._close_transport = close_transport
        self._alert = alert
        self._redirect = redirect
        self._refresh = PeriodicTask(scheduler, refresh_interval, self.refresh_catalog)
        self.state = ConnectionState.DISCONNECTED
        self.terminal = False

    def refresh_catalog(self) -> None:
        self._emit(CatalogGet())

    def _move(self, state: ConnectionState) -> None:
        if state is not self.state:
            log.info("connection %s -> %s", self.state.value, state.value)
        self.state = state

    def connecting(self) -> str:
        """Returns the bearer token to authenticate with."""
        if self.terminal:
            raise AuthError("session already terminated")
        token = self._credentials.token
        if token is None or self._credentials.user is None:
            self._terminate(ConnectionState.DISCONNECTED)
            raise AuthError("Authentication required")
        self._move(ConnectionState.CONNECTING)
        return token

    def authenticated(self) -> None:
        if self.terminal:
            return
        self._move(ConnectionState.AUTHENTICATED)
        self.refresh_catalog()
        self._refresh.start()

    def handshake_failed(self, reason: str) -> None:
        log.warning("handshake failed: %s", reason)
        if is_auth_failure(reason):
            self.auth_failed(reason)
        if not self.terminal:
            self._move(ConnectionState.DISCONNECTED)

    def auth_failed(self, reason: str) -> None:
        """A credential was rejected anywhere in the session; always raises."""
        if not self.terminal:
            self._terminate(ConnectionState.DISCONNECTED)
        raise AuthError(reason)

    def disconnected(self) -> None:
        # periodic refresh keeps running; the transport owns reconnection
        if not self.terminal:
            self._move(ConnectionState.DISCONNECTED)

    def preempted(self) -> None:
        if self.terminal:
            return
        self._alert(DUPLICATE_NOTICE)
        self._terminate(ConnectionState.PREEMPTED)
        raise DuplicatePreemptionError("session taken over by another login")

    def _terminate(self, state: ConnectionState) -> None:
        self.terminal = True
        self._move(state)
        self._refresh.stop()
        self._credentials.clear()
        self._close_transport()
        self._redirect()

    def shutdown(self) -> None:
        self._refresh.stop()
