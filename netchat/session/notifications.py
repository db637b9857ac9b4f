# netchat/session/notifications.py
"""
Transient in-view notices and OS-level notifications.

Stores never render anything; they hand text to the dispatcher, which owns
the notice list and its auto-dismiss timers.
"""
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from netchat.common import utils
from netchat.common.config import NOTICE_SECONDS
from netchat.common.protocol import PMMessage
from netchat.session.timers import CancelableTimer, Scheduler

log = logging.getLogger(__name__)

NOTICE_CAP = 200
LONG_NOTICE_CAP = 500
IMAGE_PREVIEW = "📷 Image shared"
ENCRYPTED_PREVIEW = "🔐 Encrypted message"


@dataclass
class Notice:
    id: int
    text: str
    duration: float
    timer: Optional[CancelableTimer] = field(default=None, repr=False)


def pm_preview(msg: PMMessage) -> str:
    if msg.image_ref:
        return IMAGE_PREVIEW
    if msg.encrypted:
        return ENCRYPTED_PREVIEW
    return utils.preview(msg.body)


def _default_os_notifier(title: str, body: str) -> None:
    log.info("%s: %s", title, body)


class NotificationDispatcher:
    def __init__(
        self,
        scheduler: Scheduler,
        os_notifier: Optional[Callable[[str, str], None]] = None,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self._scheduler = scheduler
        self._os_notifier = os_notifier or _default_os_notifier
        self._on_change = on_change
        self._ids = itertools.count(1)
        self._notices: Dict[int, Notice] = {}

    @property
    def notices(self) -> List[Notice]:
        return list(self._notices.values())

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()

    def show(self, text: str, duration: float = NOTICE_SECONDS) -> Notice:
        limit = LONG_NOTICE_CAP if "ENCRYPTION" in text else NOTICE_CAP
        notice = Notice(id=next(self._ids), text=utils.cap(text, limit), duration=duration)
        notice.timer = CancelableTimer(
            self._scheduler, duration, lambda: self.dismiss(notice.id)
        )
        notice.timer.arm()
        self._notices[notice.id] = notice
        self._changed()
        return notice

    def dismiss(self, notice_id: int) -> None:
        notice = self._notices.pop(notice_id, None)
        if notice is None:
            return
        notice.timer.cancel()
        self._changed()

    def hover(self, notice_id: int) -> None:
        notice = self._notices.get(notice_id)
        if notice is not None:
            notice.timer.pause()

    def unhover(self, notice_id: int) -> None:
        notice = self._notices.get(notice_id)
        if notice is not None:
            notice.timer.resume()

    def clear(self) -> None:
        for notice in self._notices.values():
            notice.timer.cancel()
        self._notices.clear()

    def notify_os(self, body: str) -> None:
        try:
            self._os_notifier("NetChat", body)
        except Exception as e:
            log.warning("OS notification failed: %s", e)

    def pm_arrived(self, peer: str, msg: PMMessage) -> None:
        """OS notification for every received PM."""
        suffix = ""
        if msg.image_ref:
            suffix = " (image)"
        elif msg.encrypted and msg.body:
            suffix = " (encrypted)"
        self.notify_os(f"New PM from {peer}{suffix}")

    def pm_unread(self, peer: str, msg: PMMessage) -> Notice:
        return self.show(f"💬 PM from {peer}:\n{pm_preview(msg)}", 5.0)

    def error(self, message: str) -> Notice:
        return self.show(f"❌ {message}")
