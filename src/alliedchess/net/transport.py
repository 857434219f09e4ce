"""Socket.IO transport for the relay server."""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import partial
from typing import TYPE_CHECKING, Any, Protocol

import socketio
from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot
from socketio.exceptions import ConnectionError as SocketIOConnectionError

from alliedchess.net.protocol import SERVER_EVENTS, pack_envelope, unpack_envelope

if TYPE_CHECKING:
    from alliedchess.net.session import NetworkSession

_LOGGER = logging.getLogger(__name__)


class RelayError(ConnectionError):
    """Raised when the relay server cannot be reached."""


class SocketClient(Protocol):
    """The subset of :class:`socketio.Client` the relay uses."""

    def on(self, event: str, handler: Callable[..., Any]) -> Any: ...

    def connect(self, url: str, **kwargs: Any) -> None: ...

    def emit(self, event: str, data: Any = None) -> None: ...

    def disconnect(self) -> None: ...


class SocketIORelay(QObject):
    """Carries relay envelopes over a python-socketio client.

    Socket.IO callbacks run on the client's background thread. They are
    re-emitted as Qt signals and handled by slots of this object, so the
    bound :class:`NetworkSession` only ever runs on the thread owning it.

    Args:
        url: Relay server address, e.g. ``http://localhost:3001``.
        client: Socket client; a non-reconnecting ``socketio.Client`` when
            omitted.
        parent: Optional Qt parent.
    """

    _received = pyqtSignal(str)
    _link_up = pyqtSignal()
    _link_down = pyqtSignal()

    __slots__ = ("_url", "_client", "_session")

    def __init__(
        self,
        url: str,
        *,
        client: SocketClient | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._url = url
        self._client: SocketClient = (
            client if client is not None else socketio.Client(reconnection=False)
        )
        self._session: NetworkSession | None = None

        self._received.connect(self._deliver)
        self._link_up.connect(self._on_link_up)
        self._link_down.connect(self._on_link_down)

        self._client.on("connect", self._on_connect)
        self._client.on("disconnect", self._on_disconnect)
        for event in SERVER_EVENTS:
            self._client.on(event, partial(self._on_event, event))

    @property
    def url(self) -> str:
        return self._url

    def attach(self, session: NetworkSession) -> None:
        """Route incoming relay traffic to *session*."""
        self._session = session

    def start(self) -> None:
        """Open the connection; the session joins once it is up."""
        _LOGGER.info("Connecting to relay %s", self._url)
        try:
            self._client.connect(self._url)
        except SocketIOConnectionError as exc:
            raise RelayError(f"Cannot reach relay at {self._url}: {exc}") from exc

    def close(self) -> None:
        self._client.disconnect()

    def send(self, text: str) -> None:
        """Emit one envelope produced by the session."""
        event, data = unpack_envelope(text)
        _LOGGER.debug("-> %s %s", event, data)
        if data:
            self._client.emit(event, data)
        else:
            self._client.emit(event)

    # ── Socket.IO thread ─────────────────────────────────────────────────

    def _on_connect(self) -> None:
        self._link_up.emit()

    def _on_event(self, event: str, data: Any = None) -> None:
        payload = data if isinstance(data, dict) else None
        self._received.emit(pack_envelope(event, payload))

    def _on_disconnect(self, *_reason: Any) -> None:
        self._link_down.emit()

    # ── Owning thread ────────────────────────────────────────────────────

    @pyqtSlot(str)
    def _deliver(self, text: str) -> None:
        if self._session is not None:
            self._session.handle_message(text)

    @pyqtSlot()
    def _on_link_up(self) -> None:
        _LOGGER.info("Connected to relay %s", self._url)
        if self._session is not None:
            self._session.connect()

    @pyqtSlot()
    def _on_link_down(self) -> None:
        _LOGGER.warning("Lost connection to relay %s", self._url)
        if self._session is not None:
            self._session.connection_lost()
