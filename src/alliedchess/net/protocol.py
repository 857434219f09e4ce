"""Relay wire protocol: JSON envelopes ``{"event": ..., "data": {...}}``.

Squares travel as ``{"r": row, "c": col}``; moves as
``{"from": square, "to": square, "promotion": "q"|"r"|"b"|"n"}`` with the
promotion omitted when absent.

Over Socket.IO the envelope is split again: the event becomes the emit name
and the data its payload (see :mod:`alliedchess.net.transport`).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from alliedchess.core.enums import PROMOTION_TYPES, Faction, PieceType
from alliedchess.core.move import Move
from alliedchess.core.types import COLS, ROWS, Square, col_of, make_square, row_of

PromotionChar = Literal["q", "r", "b", "n"]


class ProtocolError(ValueError):
    """Raised when a relay message cannot be decoded."""


# ── Payloads ─────────────────────────────────────────────────────────────────


class SquarePayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    r: int = Field(ge=0, lt=ROWS)
    c: int = Field(ge=0, lt=COLS)

    @classmethod
    def from_square(cls, sq: Square) -> SquarePayload:
        return cls(r=row_of(sq), c=col_of(sq))

    def to_square(self) -> Square:
        return make_square(self.r, self.c)


class MovePayload(BaseModel):
    """A move on the wire. ``from`` is a Python keyword, hence the alias."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_: SquarePayload = Field(alias="from")
    to: SquarePayload
    promotion: PromotionChar | None = None

    @classmethod
    def from_move(
        cls, move: Move, promotion: PieceType | None = None
    ) -> MovePayload:
        return cls(
            from_=SquarePayload.from_square(move.from_sq),
            to=SquarePayload.from_square(move.to_sq),
            promotion=promotion.char if promotion in PROMOTION_TYPES else None,
        )

    @property
    def from_sq(self) -> Square:
        return self.from_.to_square()

    @property
    def to_sq(self) -> Square:
        return self.to.to_square()

    @property
    def promotion_type(self) -> PieceType | None:
        if self.promotion is None:
            return None
        return PieceType.from_char(self.promotion)


# ── Messages: client → relay ─────────────────────────────────────────────────


class JoinGame(BaseModel):
    event: Literal["join_game"] = "join_game"


class MakeMove(BaseModel):
    event: Literal["make_move"] = "make_move"
    room: str
    move: MovePayload


class RequestRestart(BaseModel):
    event: Literal["request_restart"] = "request_restart"
    room: str


# ── Messages: relay → client ─────────────────────────────────────────────────


class WaitingForOpponent(BaseModel):
    event: Literal["waiting_for_opponent"] = "waiting_for_opponent"


class InitGame(BaseModel):
    event: Literal["init_game"] = "init_game"
    role: Literal["A", "B"]
    room: str

    @property
    def faction(self) -> Faction:
        return Faction[self.role]


class OpponentMove(MovePayload):
    event: Literal["opponent_move"] = "opponent_move"


class RestartGame(BaseModel):
    event: Literal["restart_game"] = "restart_game"


class OpponentDisconnected(BaseModel):
    event: Literal["opponent_disconnected"] = "opponent_disconnected"


Message = Annotated[
    Union[
        JoinGame,
        MakeMove,
        RequestRestart,
        WaitingForOpponent,
        InitGame,
        OpponentMove,
        RestartGame,
        OpponentDisconnected,
    ],
    Field(discriminator="event"),
]


class _Envelope(BaseModel):
    event: str
    data: dict[str, Any] = Field(default_factory=dict)


_MESSAGE_ADAPTER: TypeAdapter[Message] = TypeAdapter(Message)


# ── Codec ────────────────────────────────────────────────────────────────────


def encode_message(message: BaseModel) -> str:
    """Serialise a message model into its JSON envelope."""
    data = message.model_dump(by_alias=True, exclude={"event"}, exclude_none=True)
    return _Envelope(event=getattr(message, "event"), data=data).model_dump_json()


def decode_message(raw: str | bytes) -> Message:
    """Parse a JSON envelope into its message model.

    Raises:
        ProtocolError: if the payload is not valid JSON, the event is unknown,
            or the data does not match the event's schema.
    """
    try:
        envelope = _Envelope.model_validate_json(raw)
        return _MESSAGE_ADAPTER.validate_python(
            {**envelope.data, "event": envelope.event}
        )
    except ValidationError as exc:
        raise ProtocolError(f"Malformed relay message: {exc}") from exc
# ── Codec ────────────────────────────────────────────────────────────────────

# Events the relay emits to clients, in the order a game meets them.
SERVER_EVENTS: tuple[str, ...] = (
    "waiting_for_opponent",
    "init_game",
    "opponent_move",
    "restart_game",
    "opponent_disconnected",
)


def pack_envelope(event: str, data: Mapping[str, Any] | None = None) -> str:
    """Wrap a raw event name and payload into the JSON envelope."""
    return _Envelope(event=event, data=dict(data or {})).model_dump_json()


def unpack_envelope(raw: str | bytes) -> tuple[str, dict[str, Any]]:
    """Split a JSON envelope into its event name and payload.

    Raises:
        ProtocolError: if the text is not a valid envelope.
    """
    try:
        envelope = _Envelope.model_validate_json(raw)
    except ValidationError as exc:
        raise ProtocolError(f"Malformed relay envelope: {exc}") from exc
    return envelope.event, envelope.data


def encode_message(message: BaseModel) -> str:
    """Serialise a message model into its JSON envelope."""
    data = message.model_dump(by_alias=True, exclude={"event"}, exclude_none=True)
    return pack_envelope(getattr(message, "event"), data)


def decode_message(raw: str | bytes) -> Message:
    """Parse a JSON envelope into its message model.

    Raises:
        ProtocolError: if the payload is not valid JSON, the event is unknown,
            or the data does not match the event's schema.
    """
    event, data = unpack_envelope(raw)
    try:
        return _MESSAGE_ADAPTER.validate_python({**data, "event": event})
    except ValidationError as exc:
        raise ProtocolError(f"Malformed relay message: {exc}") from exc
