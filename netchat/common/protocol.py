# netchat/common/protocol.py
"""
Wire models for the event channel.

Every frame is one JSON object with a "type" field. Field names on the wire
are camelCase; the Python attributes are snake_case.
"""
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# ============ Data model ============

class Message(WireModel):
    id: Optional[str] = None
    author_id: Optional[str] = None
    author_name: str = ""
    body: str = ""
    timestamp: str = ""
    kind: Literal["normal", "system"] = "normal"
    encrypted: bool = False
    image_ref: Optional[str] = None


class Room(WireModel):
    name: str
    member_count: int = 0
    message_count: int = 0


class Peer(WireModel):
    id: str
    name: str
    current_room: Optional[str] = None


class PMMessage(WireModel):
    body: str = ""
    image_ref: Optional[str] = None
    timestamp: str = ""
    encrypted: bool = False
    direction: Literal["sent", "received"]


# ============ Inbound (transport -> client) ============

class SessionReady(WireModel):
    type: Literal["session:ready"]
    user_id: Optional[str] = None
    username: Optional[str] = None


class SessionRejected(WireModel):
    type: Literal["session:rejected"]
    message: str = ""


class CatalogList(WireModel):
    type: Literal["catalog:list"]
    rooms: List[Room] = []


class RoomInfo(WireModel):
    type: Literal["room:info"]
    name: str
    members: List[str] = []
    message_count: int = 0


class RoomHistory(WireModel):
    type: Literal["room:history"]
    room: str
    messages: List[Message] = []


class RoomMessage(Message):
    type: Literal["room:message"]
    room: Optional[str] = None

    def message(self) -> Message:
        return Message.model_validate(self.model_dump(exclude={"type", "room"}))


class PresenceList(WireModel):
    type: Literal["presence:list"]
    peers: List[Peer] = []


class TypingStarted(WireModel):
    type: Literal["typing:start"]
    peer: str
    room: Optional[str] = None


class TypingStopped(WireModel):
    type: Literal["typing:stop"]
    peer: str
    room: Optional[str] = None


class PMReceived(WireModel):
    type: Literal["pm:received"]
    sender: str = Field(alias="from")
    body: str = ""
    encrypted: bool = False
    image_ref: Optional[str] = None
    timestamp: str = ""

    def message(self) -> PMMessage:
        return PMMessage(
            body=self.body,
            image_ref=self.image_ref,
            timestamp=self.timestamp,
            encrypted=self.encrypted,
            direction="received",
        )


class SessionDuplicate(WireModel):
    type: Literal["session:duplicate"]


class TransportError(WireModel):
    type: Literal["transport:error"]
    message: str = ""


InboundEvent = Annotated[
    Union[
        SessionReady,
        SessionRejected,
        CatalogList,
        RoomInfo,
        RoomHistory,
        RoomMessage,
        PresenceList,
        TypingStarted,
        TypingStopped,
        PMReceived,
        SessionDuplicate,
        TransportError,
    ],
    Field(discriminator="type"),
]

_inbound = TypeAdapter(InboundEvent)


def parse_inbound(obj: dict) -> InboundEvent:
    """Raises pydantic.ValidationError for unknown kinds or bad payloads."""
    return _inbound.validate_python(obj)


# ============ Outbound (client -> transport) ============

class Authenticate(WireModel):
    type: Literal["auth"] = "auth"
    token: str


class CatalogGet(WireModel):
    type: Literal["catalog:get"] = "catalog:get"


class RoomJoin(WireModel):
    type: Literal["room:join"] = "room:join"
    name: str


class RoomLeave(WireModel):
    type: Literal["room:leave"] = "room:leave"


class RoomHistoryGet(WireModel):
    type: Literal["room:history:get"] = "room:history:get"
    room: str


class MessageSend(WireModel):
    type: Literal["message:send"] = "message:send"
    body: str = ""
    room: str
    encrypted: bool = False
    password: Optional[str] = None
    image_ref: Optional[str] = None


class TypingSignal(WireModel):
    type: Literal["typing:start", "typing:stop"]


class PMSend(WireModel):
    type: Literal["pm:send"] = "pm:send"
    to: str
    body: str = ""
    encrypted: bool = False
    password: Optional[str] = None
    image_ref: Optional[str] = None


OutboundEvent = Union[
    Authenticate,
    CatalogGet,
    RoomJoin,
    RoomLeave,
    RoomHistoryGet,
    MessageSend,
    TypingSignal,
    PMSend,
]
