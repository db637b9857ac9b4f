"""Unit tests for the room store."""
import pytest

from netchat.common.protocol import Message, Room, RoomHistoryGet, RoomJoin
from netchat.session.rooms import RoomStore
from netchat.session.typing import TypingCoordinator


@pytest.fixture
def typing(scheduler, transport):
    return TypingCoordinator(scheduler, transport.send, self_name="alice")


@pytest.fixture
def rooms(transport, typing):
    return RoomStore(transport.send, typing)


def msg(author: str, body: str) -> Message:
    return Message(author_name=author, body=body, timestamp="2024-01-01T00:00:00Z")


class TestJoinLeave:
    def test_input_disabled_without_room(self, rooms):
        assert rooms.active_room is None
        assert not rooms.input_enabled

    def test_join_requests_join_and_history(self, rooms, transport):
        assert rooms.join("general")
        assert transport.sent == [RoomJoin(name="general"), RoomHistoryGet(room="general")]
        assert rooms.input_enabled
        assert rooms.session.loading
        assert rooms.session.history == []

    def test_rejoining_active_room_is_a_no_op(self, rooms, transport):
        rooms.join("general")
        rooms.load_history("general", [msg("bob", "hi")])
        transport.clear()

        assert not rooms.join("general")
        assert transport.sent == []
        assert [m.body for m in rooms.session.history] == ["hi"]

    def test_switching_rooms_discards_history(self, rooms):
        rooms.join("general")
        rooms.load_history("general", [msg("bob", "hi")])
        rooms.join("random")
        assert rooms.session.history == []
        assert rooms.active_room == "random"

    def test_leave(self, rooms, transport):
        rooms.join("general")
        transport.clear()
        assert rooms.leave()
        assert transport.types() == ["room:leave"]
        assert rooms.active_room is None
        assert not rooms.input_enabled
        assert not rooms.leave()


class TestInbound:
    def test_catalog_replaced_wholesale(self, rooms):
        rooms.refresh_catalog([Room(name="a"), Room(name="b")])
        rooms.refresh_catalog([Room(name="c", member_count=2)])
        assert [r.name for r in rooms.catalog] == ["c"]

    def test_history_replaces_not_appends(self, rooms):
        rooms.join("general")
        rooms.apply_incoming_message(msg("bob", "early"))
        rooms.load_history("general", [msg("bob", "one"), msg("carol", "two")])
        assert [m.body for m in rooms.session.history] == ["one", "two"]
        assert not rooms.session.loading

    def test_history_for_other_room_dropped(self, rooms):
        rooms.join("general")
        rooms.load_history("random", [msg("bob", "x")])
        assert rooms.session.history == []
        assert rooms.session.loading

    def test_info(self, rooms):
        rooms.join("general")
        rooms.apply_info("general", ["alice", "bob"], 7)
        rooms.apply_info("random", ["zed"], 1)
        assert rooms.session.members == {"alice", "bob"}
        assert rooms.session.message_count == 7

    def test_message_appends_and_clears_typing(self, rooms, typing):
        rooms.join("general")
        typing.peer_started("bob", "general", "general")
        assert rooms.apply_incoming_message(msg("bob", "hello"), "general")
        assert typing.peers == []
        assert [m.body for m in rooms.session.history] == ["hello"]

    def test_message_for_other_room_dropped(self, rooms):
        rooms.join("general")
        assert not rooms.apply_incoming_message(msg("bob", "elsewhere"), "random")
        assert rooms.session.history == []

    def test_message_without_room_dropped(self, rooms):
        assert not rooms.apply_incoming_message(msg("bob", "hello"))
