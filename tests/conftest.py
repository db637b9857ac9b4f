"""Pytest configuration and shared fixtures."""
from typing import Callable, List, Optional
from unittest.mock import Mock

import pytest

from netchat.api import ApiClient
from netchat.session.context import SessionContext
from netchat.storage.credentials import CredentialStore, User
from netchat.storage.local import LocalStorage


class FakeHandle:
    def __init__(self, when: float, callback: Callable[[], None]):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Manual clock; nothing fires until advance() is called."""

    def __init__(self):
        self.now = 0.0
        self._handles: List[FakeHandle] = []

    def time(self) -> float:
        return self.now

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeHandle:
        handle = FakeHandle(self.now + delay, callback)
        self._handles.append(handle)
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for h in self._handles if not h.cancelled)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [h for h in self._handles if not h.cancelled and h.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self._handles.remove(handle)
            self.now = handle.when
            handle.callback()
        self.now = target


class RecordingTransport:
    def __init__(self):
        self.sent = []
        self.closed = False

    def send(self, event) -> None:
        self.sent.append(event)

    def close(self) -> None:
        self.closed = True

    def types(self) -> List[str]:
        return [event.type for event in self.sent]

    def clear(self) -> None:
        self.sent.clear()


class ScriptedSecrets:
    def __init__(self, *answers: Optional[str]):
        self.answers = list(answers)
        self.prompts: List[str] = []

    def request_password(self, prompt: str) -> Optional[str]:
        self.prompts.append(prompt)
        return self.answers.pop(0) if self.answers else None


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "state")


@pytest.fixture
def secrets():
    return ScriptedSecrets()


@pytest.fixture
def api_client():
    return Mock(spec=ApiClient)


@pytest.fixture
def logged_in(storage):
    CredentialStore(storage).save("tok-123", User(id="u1", username="alice"))
    return storage


@pytest.fixture
def ctx(scheduler, transport, logged_in, api_client, secrets):
    """Session context for user 'alice' with every collaborator faked."""
    redirects = []
    context = SessionContext(
        scheduler,
        transport,
        logged_in,
        api_client,
        secrets,
        os_notifier=Mock(),
        redirect=lambda: redirects.append(True),
    )
    context.redirects = redirects
    return context
