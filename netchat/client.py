"""Console client: connects the session context to a terminal and a TCP transport."""

import argparse
import asyncio
import contextlib
import getpass
import logging
import sys
from typing import Optional

from netchat.api import ApiClient
from netchat.common.config import Settings, load_settings
from netchat.common.errors import AuthError, DuplicatePreemptionError, SessionTerminated
from netchat.common.protocol import Authenticate
from netchat.session.context import SessionContext
from netchat.storage.credentials import CredentialStore, User
from netchat.storage.local import LocalStorage
from netchat.transport import LineTransport

log = logging.getLogger(__name__)

RECONNECT_DELAY = 2.0

HELP = """\
  /rooms                 list rooms
  /join <room>           join (or create) a room
  /leave                 leave the current room
  /who                   online users
  /pm <user>             open a private conversation
  /close                 close the private conversation
  /encrypt               toggle room encryption
  /pmencrypt             toggle PM encryption
  /image <path> [text]   share an image (room, or staged for the open PM)
  /reveal <token>        reveal an encrypted message
  /logout                log out
  /quit                  exit
  anything else          message to the open PM, or to the room"""


class ConsoleSecrets:
    def request_password(self, prompt: str) -> Optional[str]:
        try:
            return getpass.getpass(f"{prompt}: ")
        except EOFError:
            return None


def print_os_notification(title: str, body: str) -> None:
    print(f"\a[{title}] {body}")


class ConsoleView:
    """Prints notices and typing-indicator changes; reads stores only."""

    def __init__(self):
        self.ctx: Optional[SessionContext] = None
        self._indicator: Optional[str] = None
        self._rendering = False

    def render(self) -> None:
        if self.ctx is None or self._rendering:
            return
        self._rendering = True
        try:
            for notice in self.ctx.notifications.notices:
                print(f"[notice] {notice.text}")
                self.ctx.notifications.dismiss(notice.id)
        finally:
            self._rendering = False
        indicator = self.ctx.typing.indicator()
        if indicator != self._indicator:
            self._indicator = indicator
            if indicator:
                print(f"[~] {indicator}")


def show_rooms(ctx: SessionContext) -> None:
    if not ctx.rooms.catalog:
        print("No rooms yet")
    for room in ctx.rooms.catalog:
        marker = "*" if room.name == ctx.rooms.active_room else " "
        print(f" {marker} {room.name}  👥 {room.member_count}  💬 {room.message_count}")


def show_peers(ctx: SessionContext) -> None:
    if not ctx.peers.peers:
        print("No users online")
    for peer in ctx.peers.peers:
        me = " (you)" if peer.name == ctx.username else ""
        unread = f"  [{ctx.pm.unread(peer.name)} unread]" if ctx.pm.unread(peer.name) else ""
        room = f"  📌 {peer.current_room}" if peer.current_room else ""
        print(f"  {peer.name}{me}{room}{unread}")


def show_thread(ctx: SessionContext, peer: str) -> None:
    for msg in ctx.pm.thread(peer):
        label = "You" if msg.direction == "sent" else peer
        body = "🔐 Encrypted message" if msg.encrypted else msg.body
        if msg.image_ref:
            body = f"[image {msg.image_ref}] {body}"
        print(f"  {label}: {body}")


async def handle_line(ctx: SessionContext, line: str) -> bool:
    """Run one user command. Returns False when the client should exit."""
    cmd, _, arg = line.strip().partition(" ")
    arg = arg.strip()

    if cmd == "/quit":
        return False
    if cmd == "/help":
        print(HELP)
    elif cmd == "/rooms":
        show_rooms(ctx)
    elif cmd == "/join":
        ctx.create_room(arg)
    elif cmd == "/leave":
        ctx.leave_room()
    elif cmd == "/who":
        show_peers(ctx)
    elif cmd == "/pm":
        ctx.open_pm(arg)
        print(f"[+] Private conversation with {arg}")
        show_thread(ctx, arg)
    elif cmd == "/close":
        ctx.close_pm()
    elif cmd == "/encrypt":
        ctx.toggle_room_encryption()
    elif cmd == "/pmencrypt":
        ctx.toggle_pm_encryption()
    elif cmd == "/image":
        path, _, caption = arg.partition(" ")
        if ctx.pm.focused_peer is not None:
            await ctx.attach_pm_image(path)
        else:
            await ctx.send_room_image(path, caption)
    elif cmd == "/reveal":
        text = await ctx.reveal(arg)
        if text is not None:
            print(f"  🔓 {text}")
    elif cmd == "/logout":
        await ctx.logout()
        return False
    elif ctx.pm.focused_peer is not None:
        ctx.send_pm(line)
    else:
        ctx.input_changed()
        ctx.submit_message(line)
    return True


async def read_commands(ctx: SessionContext, view: ConsoleView) -> None:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
    while True:
        raw = await reader.readline()
        if not raw:
            return
        line = raw.decode("utf-8", errors="replace").rstrip("\n")
        if not await handle_line(ctx, line):
            return
        view.render()


async def keep_connected(ctx: SessionContext, transport: LineTransport, channel: asyncio.Queue) -> None:
    while not ctx.connection.terminal and not transport.closed:
        token = ctx.connection.connecting()
        try:
            await transport.connect()
        except OSError as e:
            log.warning("connect failed: %s", e)
            ctx.connection.disconnected()
            await asyncio.sleep(RECONNECT_DELAY)
            continue
        transport.send(Authenticate(token=token))
        await transport.pump(channel)
        ctx.connection.disconnected()
        await asyncio.sleep(RECONNECT_DELAY)


async def run_client(settings: Settings) -> int:
    loop = asyncio.get_running_loop()
    storage = LocalStorage(settings.state_dir)
    transport = LineTransport(settings.host, settings.port)
    credentials = CredentialStore(storage)
    api_client = ApiClient(settings.api_url, lambda: credentials.token, settings.http_timeout)
    view = ConsoleView()
    ctx = SessionContext(
        loop,
        transport,
        storage,
        api_client,
        ConsoleSecrets(),
        os_notifier=print_os_notification,
        alert=lambda text: print(f"[!] {text}"),
        redirect=lambda: print("[!] Please log in again."),
        on_change=view.render,
    )
    view.ctx = ctx
    user = ctx.credentials.user
    if user is None or ctx.credentials.token is None:
        print("[!] Not logged in. Run with --token, --user-id and --username.")
        return 1
    print(f"[+] Welcome, {user.username}! Type /help for commands.")

    channel: asyncio.Queue = asyncio.Queue()
    router_task = asyncio.create_task(ctx.router.run(channel))
    link_task = asyncio.create_task(keep_connected(ctx, transport, channel))
    input_task = asyncio.create_task(read_commands(ctx, view))

    status = 0
    try:
        done, _ = await asyncio.wait(
            {router_task, link_task, input_task}, return_when=asyncio.FIRST_COMPLETED
        )
        for task in done:
            task.result()
    except DuplicatePreemptionError:
        status = 2
    except AuthError as e:
        print(f"[!] Authentication failed: {e}")
        status = 1
    except SessionTerminated:
        status = 1
    finally:
        for task in (router_task, link_task, input_task):
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError, SessionTerminated):
                await task
        ctx.teardown()
    return status


def main():
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    parser = argparse.ArgumentParser(description="NetChat console client")
    parser.add_argument("--token", help="bearer token issued at login")
    parser.add_argument("--user-id", help="id of the logged-in user")
    parser.add_argument("--username", help="name of the logged-in user")
    args = parser.parse_args()

    if args.token and args.user_id and args.username:
        CredentialStore(LocalStorage(settings.state_dir)).save(
            args.token, User(id=args.user_id, username=args.username)
        )

    print(f"[+] Connecting to {settings.host}:{settings.port} ...")
    raise SystemExit(asyncio.run(run_client(settings)))


if __name__ == "__main__":
    main()
