# netchat/transport.py
"""Event transport: newline-delimited JSON frames over plain TCP."""
import asyncio
import json
import logging
from typing import Optional

from netchat.common.protocol import OutboundEvent

log = logging.getLogger(__name__)


def encode_frame(obj: dict) -> bytes:
    return json.dumps(obj).encode("utf-8") + b"\n"


def decode_frame(line: bytes) -> dict | None:
    """
    Decode one frame. Returns None for blank lines and for anything that is
    not a JSON object.
    """
    line = line.strip()
    if not line:
        return None
    try:
        obj = json.loads(line.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        log.warning("bad frame from server: %s", e)
        return None
    return obj if isinstance(obj, dict) else None


class LineTransport:
    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self.closed = False

    @property
    def connected(self) -> bool:
        return self._writer is not None and not self._writer.is_closing()

    async def connect(self) -> None:
        self._reader, self._writer = await asyncio.open_connection(self.host, self.port)
        log.info("connected to %s:%d", self.host, self.port)

    def send(self, event: OutboundEvent) -> None:
        if not self.connected:
            log.debug("not connected; dropping outbound %s", event.type)
            return
        self._writer.write(encode_frame(event.to_wire()))

    async def pump(self, channel: "asyncio.Queue[Optional[dict]]") -> None:
        """Feed decoded frames into channel until EOF."""
        while self._reader is not None:
            line = await self._reader.readline()
            if not line:
                break
            obj = decode_frame(line)
            if obj is not None:
                await channel.put(obj)
        log.info("connection to %s:%d lost", self.host, self.port)
        self._drop()

    def _drop(self) -> None:
        if self._writer is not None:
            self._writer.close()
        self._reader = None
        self._writer = None

    def close(self) -> None:
        self.closed = True
        self._drop()
