# netchat/session/context.py
"""
The session context: owns every store for one logged-in session and is the
only place user actions enter. The view reads the stores; it never writes.
"""
import asyncio
import logging
from contextlib import contextmanager
from typing import Callable, Dict, List, Optional, Protocol

from netchat import api
from netchat.common import utils
from netchat.common.errors import AuthError, RecoverableError, ValidationError
from netchat.common.protocol import MessageSend, OutboundEvent, PMMessage, PMSend
from netchat.crypto import keystream
from netchat.session.connection import ConnectionSessionManager
from netchat.session.encryption import EncryptionToggle
from netchat.session.notifications import NotificationDispatcher
from netchat.session.presence import PeerTable
from netchat.session.private import PrivateMessageStore
from netchat.session.rooms import RoomStore
from netchat.session.router import EventRouter
from netchat.session.timers import Scheduler
from netchat.session.typing import TypingCoordinator
from netchat.storage.credentials import CredentialStore
from netchat.storage.local import LocalStorage
from netchat.storage.unread import UnreadCounterStore

log = logging.getLogger(__name__)


class Transport(Protocol):
    def send(self, event: OutboundEvent) -> None: ...

    def close(self) -> None: ...


class SecretProvider(Protocol):
    def request_password(self, prompt: str) -> Optional[str]: ...


class SessionContext:
    def __init__(
        self,
        scheduler: Scheduler,
        transport: Transport,
        storage: LocalStorage,
        api_client: api.ApiClient,
        secrets: SecretProvider,
        os_notifier: Optional[Callable[[str, str], None]] = None,
        alert: Optional[Callable[[str], None]] = None,
        redirect: Optional[Callable[[], None]] = None,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self._transport = transport
        self._api = api_client
        self._secrets = secrets

        self.credentials = CredentialStore(storage)
        self.counters = UnreadCounterStore(storage)
        self.counters.load()

        self.notifications = NotificationDispatcher(scheduler, os_notifier, on_change)

        user = self.credentials.user
        self.typing = TypingCoordinator(
            scheduler, self.emit, self_name=user.username if user else None
        )
        self.rooms = RoomStore(self.emit, self.typing)
        self.pm = PrivateMessageStore(self.counters, self.notifications)
        self.peers = PeerTable()
        self.room_encryption = EncryptionToggle()
        self.pm_encryption = EncryptionToggle()
        self.pm_image_ref: Optional[str] = None
        self.revealed: Dict[str, str] = {}

        self.connection = ConnectionSessionManager(
            scheduler,
            self.credentials,
            self.emit,
            close_transport=transport.close,
            alert=alert or (lambda text: self.notifications.show(text)),
            redirect=redirect or (lambda: None),
        )
        self.router = EventRouter(self, on_change)

    # ============ Lifecycle ============

    def emit(self, event: OutboundEvent) -> None:
        self._transport.send(event)

    @property
    def username(self) -> Optional[str]:
        return self.typing.self_name

    def teardown(self) -> None:
        self.typing.cancel()
        self.connection.shutdown()
        self.notifications.clear()
        self._transport.close()

    @contextmanager
    def _absorb(self):
        """Turn a recoverable error into a transient notice; a rejected
        credential ends the session."""
        try:
            yield
        except RecoverableError as e:
            log.info("action rejected: %s", e)
            self.notifications.error(str(e))
        except AuthError as e:
            self.connection.auth_failed(str(e))

    def _obfuscated(self, toggle: EncryptionToggle, body: str) -> str:
        if toggle.enabled and body:
            return keystream.obfuscate(body, toggle.password)
        return body

    # ============ Rooms ============

    def join_room(self, name: str) -> bool:
        return self.rooms.join(name)

    def create_room(self, name: str) -> None:
        with self._absorb():
            name = name.strip()
            if not name:
                raise ValidationError("Please enter a room name")
            self.rooms.join(name)
            self.connection.refresh_catalog()

    def leave_room(self) -> None:
        if self.rooms.leave():
            self.connection.refresh_catalog()

    def input_changed(self) -> None:
        self.typing.input_changed(self.rooms.input_enabled)

    def submit_message(self, body: str) -> None:
        with self._absorb():
            body = body.strip()
            if not body:
                return
            room = self.rooms.active_room
            if room is None:
                raise ValidationError("Please join a room first")
            self.emit(MessageSend(
                body=self._obfuscated(self.room_encryption, body),
                room=room,
                encrypted=self.room_encryption.enabled,
            ))
            self.typing.submitted()

    async def send_room_image(self, path: str, caption: str = "") -> None:
        with self._absorb():
            if self.rooms.active_room is None:
                raise ValidationError("Please join a room first")
            data, content_type = api.validate_image(path)
            image_ref = await asyncio.to_thread(
                self._api.upload_image, path, data, content_type
            )
            room = self.rooms.active_room
            if room is None:
                return
            self.emit(MessageSend(body=caption.strip(), room=room, image_ref=image_ref))
            self.notifications.show("✅ Image sent!")

    # ============ Private messages ============

    def open_pm(self, peer: str) -> List[PMMessage]:
        if peer != self.pm.focused_peer:
            self.pm_encryption.reset()
            self.pm_image_ref = None
        return self.pm.open(peer)

    def close_pm(self) -> None:
        self.pm.close()

    def send_pm(self, body: str) -> None:
        peer = self.pm.focused_peer
        body = body.strip()
        if peer is None or (not body and not self.pm_image_ref):
            return
        encrypted = self.pm_encryption.enabled and bool(body)
        body = self._obfuscated(self.pm_encryption, body)
        self.emit(PMSend(to=peer, body=body, encrypted=encrypted, image_ref=self.pm_image_ref))
        self.pm.append_sent(peer, PMMessage(
            body=body,
            image_ref=self.pm_image_ref,
            timestamp=utils.now_iso(),
            encrypted=encrypted,
            direction="sent",
        ))
        self.pm_image_ref = None
        self.notifications.show("✅ PM sent!", 3.0)

    async def attach_pm_image(self, path: str) -> None:
        with self._absorb():
            peer = self.pm.focused_peer
            if peer is None:
                raise ValidationError("Open a conversation first")
            data, content_type = api.validate_image(path)
            image_ref = await asyncio.to_thread(
                self._api.upload_image, path, data, content_type
            )
            if self.pm.focused_peer != peer:
                return
            self.pm_image_ref = image_ref
            self.notifications.show(
                "✅ Image ready to send. Add a caption (optional) and click Send!", 4.0
            )

    # ============ Encryption ============

    def _toggle(self, toggle: EncryptionToggle, label: str) -> None:
        if toggle.enabled:
            toggle.disable()
            self.notifications.show(f"🔓 {label} DISABLED\n\nMessages will be sent as plain text.", 3.0)
            return
        with self._absorb():
            password = self._secrets.request_password(f"Enter {label.lower()} password")
            if not password:
                self.notifications.show(f"❌ {label} cancelled - no password provided", 3.0)
                return
            toggle.enable(password)
            self.notifications.show(
                f"🔐 {label} ENABLED\n\nShare the password with whoever should read it.", 5.0
            )

    def toggle_room_encryption(self) -> None:
        self._toggle(self.room_encryption, "Encryption")

    def toggle_pm_encryption(self) -> None:
        self._toggle(self.pm_encryption, "PM Encryption")

    async def reveal(self, token: str) -> Optional[str]:
        """Ask the server to reveal an obfuscated body; None if not revealed."""
        if token in self.revealed:
            return self.revealed[token]
        with self._absorb():
            password = self._secrets.request_password("Enter decryption password")
            if not password:
                self.notifications.show("❌ Decryption cancelled", 2.0)
                return None
            text = await asyncio.to_thread(self._api.reveal, token, password)
            self.revealed[token] = text
            self.notifications.show("✅ Message decrypted successfully", 2.0)
            return text
        return None

    # ============ Logout ============

    async def logout(self) -> None:
        if self.credentials.token:
            try:
                await asyncio.to_thread(self._api.logout)
            except (RecoverableError, AuthError) as e:
                log.info("logout call failed, logging out locally: %s", e)
        self.credentials.clear()
        self.teardown()
