"""Application bootstrap helpers."""

from __future__ import annotations

import logging
import random
import sys
from typing import TYPE_CHECKING

from alliedchess.config import GameSettings
from alliedchess.core.enums import Faction
from alliedchess.engine.minimax import MinimaxEngine
from alliedchess.game.controller import GameController
from alliedchess.game.engine_session import EngineSession
from alliedchess.game.player import HumanPlayer
from alliedchess.net.session import NetworkSession
from alliedchess.net.transport import RelayError, SocketIORelay

if TYPE_CHECKING:
    from PyQt6.QtCore import QCoreApplication

_LOGGER = logging.getLogger(__name__)
_LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Route library logging to stderr at *level*."""
    logging.basicConfig(level=level.upper(), format=_LOG_FORMAT, stream=sys.stderr)


def build_engine_session(
    controller: GameController,
    settings: GameSettings,
    parent: QCoreApplication | None = None,
) -> EngineSession:
    """Create the Enemy session described by *settings*."""
    engine_cfg = settings.engine
    engine = MinimaxEngine(rng=random.Random(engine_cfg.seed), jitter=engine_cfg.jitter)
    return EngineSession(
        controller=controller,
        parent=parent,
        max_depth=engine_cfg.depth,
        delay_ms=engine_cfg.delay_ms,
        engine=engine,
    )


def build_relay(
    controller: GameController,
    url: str,
    parent: QCoreApplication | None = None,
) -> tuple[SocketIORelay, NetworkSession]:
    """Create a relay transport and the network session bound to it."""
    relay = SocketIORelay(url, parent=parent)
    network = NetworkSession(controller, relay.send)
    relay.attach(network)
    return relay, network


def run_application(settings: GameSettings, argv: list[str] | None = None) -> int:
    """Create the Qt event loop and play on the console.

    Without a relay URL both allies share this console (hot-seat). With one,
    this client plays the role the relay assigns once an ally joins.
    """
    from PyQt6.QtCore import QCoreApplication

    from alliedchess.console import ConsoleAdapter

    app = QCoreApplication.instance() or QCoreApplication(
        sys.argv if argv is None else argv
    )
    app.setApplicationName("AlliedChess")

    controller = GameController()
    session = build_engine_session(controller, settings, parent=app)

    relay: SocketIORelay | None = None
    on_restart = None
    if settings.server:
        relay, network = build_relay(controller, settings.server, parent=app)
        on_restart = network.request_restart
        # No local input until the relay pairs us with an ally.
        controller.set_waiting(True)

    console = ConsoleAdapter(controller, on_quit=app.quit, on_restart=on_restart)
    console.attach()

    controller.new_game(
        {
            Faction.A: HumanPlayer(Faction.A),
            Faction.B: HumanPlayer(Faction.B),
            Faction.ENEMY: session.create_ai_player(),
        },
        layout=settings.layout,
    )
    _LOGGER.info(
        "Started %s game (engine depth %d)", settings.layout, settings.engine.depth
    )

    try:
        if relay is not None:
            try:
                relay.start()
            except RelayError as exc:
                _LOGGER.error("%s", exc)
                return 1
        return app.exec()
    finally:
        session.shutdown()
        if relay is not None:
            relay.close()
