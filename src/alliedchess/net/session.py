"""Binds a GameController to a relay connection."""

from __future__ import annotations

import logging
from collections.abc import Callable

from pydantic import BaseModel

from alliedchess.core.enums import Faction
from alliedchess.core.types import Square
from alliedchess.game.controller import GameController
from alliedchess.game.interfaces import MoveOrigin
from alliedchess.game.state import MoveRecord
from alliedchess.net.protocol import (
    InitGame,
    JoinGame,
    MakeMove,
    MovePayload,
    OpponentDisconnected,
    OpponentMove,
    ProtocolError,
    RequestRestart,
    RestartGame,
    WaitingForOpponent,
    decode_message,
    encode_message,
)

_LOGGER = logging.getLogger(__name__)


class NetworkSession:
    """Relays moves between the local controller and the room peer.

    The transport is abstracted as a ``send(text)`` callable; incoming text
    is fed to :meth:`handle_message`. Both run on the controller's thread.
    """

    __slots__ = ("_controller", "_send", "_room", "_role")

    def __init__(self, controller: GameController, send: Callable[[str], None]) -> None:
        self._controller = controller
        self._send = send
        self._room: str | None = None
        self._role: Faction | None = None
        controller.events.on_move.append(self._on_move)
        controller.events.on_desync.append(self._on_desync)

    @property
    def room(self) -> str | None:
        return self._room

    @property
    def role(self) -> Faction | None:
        return self._role

    @property
    def in_room(self) -> bool:
        return self._room is not None

    # ── Outgoing ─────────────────────────────────────────────────────────

    def connect(self) -> None:
        """Transport is up: ask the relay for a room."""
        _LOGGER.info("Joining relay matchmaking")
        self._controller.set_waiting(True)
        self._post(JoinGame())

    def connection_lost(self) -> None:
        """Transport is down: leave the room and block local input."""
        self._room = None
        self._controller.set_waiting(True)

    def request_restart(self) -> None:
        if self._room is None:
            return
        _LOGGER.info("Requesting restart of room %s", self._room)
        self._post(RequestRestart(room=self._room))

    def _post(self, message: BaseModel) -> None:
        self._send(encode_message(message))

    # ── Incoming ─────────────────────────────────────────────────────────

    def handle_message(self, raw: str | bytes) -> None:
        """Decode and dispatch one relay message; malformed ones are dropped."""
        try:
            message = decode_message(raw)
        except ProtocolError as exc:
            _LOGGER.warning("Ignoring relay message: %s", exc)
            return

        if isinstance(message, WaitingForOpponent):
            _LOGGER.info("Waiting for an ally to join")
            self._controller.set_waiting(True)
        elif isinstance(message, InitGame):
            self._start(message)
        elif isinstance(message, OpponentMove):
            self._controller.apply_remote_move(
                message.from_sq, message.to_sq, message.promotion_type
            )
        elif isinstance(message, RestartGame):
            _LOGGER.info("Room %s restarted", self._room)
            self._controller.restart()
        elif isinstance(message, OpponentDisconnected):
            _LOGGER.warning("Ally left room %s", self._room)
            self._room = None
            self._controller.set_waiting(True)
        else:
            _LOGGER.warning("Unexpected %s from relay", message.event)

    def _start(self, message: InitGame) -> None:
        self._room = message.room
        self._role = message.faction
        _LOGGER.info("Joined room %s as %s", self._room, self._role)
        self._controller.set_role(self._role)
        self._controller.set_waiting(False)
        self._controller.restart()

    # ── Controller events ────────────────────────────────────────────────

    def _on_move(self, record: MoveRecord, origin: MoveOrigin) -> None:
        if origin == MoveOrigin.REMOTE or self._room is None:
            return
        payload = MovePayload.from_move(record.move, record.promotion)
        self._post(MakeMove(room=self._room, move=payload))

    def _on_desync(self, from_sq: Square, to_sq: Square) -> None:
        _LOGGER.error("Out of sync with ally (%r -> %r); restarting", from_sq, to_sq)
        self.request_restart()
