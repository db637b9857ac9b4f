# netchat/session/presence.py
from typing import List, Optional

from netchat.common.protocol import Peer


class PeerTable:
    """Online peers, replaced wholesale on every presence snapshot."""

    def __init__(self):
        self._peers: List[Peer] = []

    def replace(self, peers: List[Peer]) -> None:
        self._peers = list(peers)

    @property
    def peers(self) -> List[Peer]:
        return list(self._peers)

    def find(self, name: str) -> Optional[Peer]:
        for peer in self._peers:
            if peer.name == name:
                return peer
        return None
