"""Relay networking: wire protocol and controller binding."""

from alliedchess.net.protocol import (
    Message,
    MovePayload,
    ProtocolError,
    SquarePayload,
    decode_message,
    encode_message,
)
from alliedchess.net.session import NetworkSession
from alliedchess.net.transport import RelayError, SocketIORelay

__all__ = [
    "Message",
    "MovePayload",
    "NetworkSession",
    "ProtocolError",
    "RelayError",
    "SocketIORelay",
    "SquarePayload",
    "decode_message",
    "encode_message",
]
