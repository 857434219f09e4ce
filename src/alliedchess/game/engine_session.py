"""Enemy search session orchestration for the main thread."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from PyQt6.QtCore import QObject, QTimer

from alliedchess.core.enums import Faction
from alliedchess.core.move import Move
from alliedchess.core.move_generator import MoveGenerator
from alliedchess.engine.qt_bridge import EngineWorker
from alliedchess.game.interfaces import GamePhase, MoveOrigin
from alliedchess.game.player import AIPlayer

if TYPE_CHECKING:
    from alliedchess.engine.search import IEngine
    from alliedchess.game.controller import GameController
    from alliedchess.game.state import GameState

_LOGGER = logging.getLogger(__name__)


class EngineSession:
    """Defers Enemy searches to the event loop and hands results back.

    A request starts a single-shot timer; when it fires the worker searches
    a copy of the live board synchronously and its signals feed the outcome
    into the controller. Stale results (after a restart or a newer request) are
    dropped by request id.
    """

    _REQUEST_DELAY_MS = 100

    __slots__ = (
        "__weakref__",
        "_controller",
        "_worker",
        "_dispatch_timer",
        "_request_id",
        "_pending_request",
    )

    def __init__(
        self,
        *,
        controller: GameController,
        parent: QObject | None = None,
        max_depth: int = 2,
        delay_ms: int | None = None,
        engine: IEngine | None = None,
    ) -> None:
        self._controller = controller
        self._worker = EngineWorker(max_depth=max_depth, engine=engine)
        self._worker.best_move_ready.connect(self._on_best_move)
        self._worker.search_no_move.connect(self._on_no_move)
        self._worker.search_error.connect(self._on_error)

        self._dispatch_timer = QTimer(parent)
        self._dispatch_timer.setSingleShot(True)
        self._dispatch_timer.setInterval(
            self._REQUEST_DELAY_MS if delay_ms is None else delay_ms
        )
        self._dispatch_timer.timeout.connect(self.dispatch)

        self._request_id = 0
        self._pending_request: int | None = None

    @property
    def worker(self) -> EngineWorker:
        return self._worker

    @property
    def is_pending(self) -> bool:
        return self._pending_request is not None

    def create_ai_player(self, name: str = "Enemy") -> AIPlayer:
        """Create the Enemy player wired to this session."""
        return AIPlayer(Faction.ENEMY, name, on_request_move=self.request_move)

    def set_depth(self, max_depth: int) -> None:
        self._worker.set_limits(max_depth)

    def request_move(self, state: GameState) -> None:
        """Queue a search; it runs once control returns to the event loop."""
        self._request_id += 1
        self._pending_request = self._request_id
        _LOGGER.debug(
            "Queued Enemy search %d at turn %d", self._request_id, state.turn_index
        )
        self._dispatch_timer.start()

    def cancel(self) -> None:
        self._dispatch_timer.stop()
        self._pending_request = None

    def shutdown(self) -> None:
        self.cancel()

    def dispatch(self) -> None:
        """Run the pending search now (the timer calls this)."""
        request_id = self._pending_request
        if request_id is None:
            return

        state = self._controller.state
        if state.phase != GamePhase.THINKING or state.current_faction != Faction.ENEMY:
            self._pending_request = None
            return
        self._worker.request_move(state.board.copy(), request_id)

    # ── Worker results ───────────────────────────────────────────────────

    def _on_best_move(
        self,
        request_id: int,
        move_obj: object,
        score: int,
        depth: int,
        nodes: int,
    ) -> None:
        if request_id != self._pending_request:
            return
        self._pending_request = None
        if not isinstance(move_obj, Move):
            self._fall_back(f"engine returned {move_obj!r}")
            return

        _LOGGER.info(
            "Enemy search %d: %s score=%d depth=%d nodes=%d",
            request_id,
            move_obj,
            score,
            depth,
            nodes,
        )
        if not self._controller.submit_move(
            move_obj.from_sq, move_obj.to_sq, MoveOrigin.ENGINE
        ):
            self._fall_back(f"engine move {move_obj} was rejected")

    def _on_no_move(self, request_id: int, _score: int, _depth: int, _nodes: int) -> None:
        if request_id != self._pending_request:
            return
        self._pending_request = None
        self._fall_back("search found no move")

    def _on_error(self, request_id: int, message: str) -> None:
        if request_id != self._pending_request:
            return
        self._pending_request = None
        _LOGGER.error("Enemy search %d failed: %s", request_id, message)
        self._fall_back(message)

    def _fall_back(self, reason: str) -> None:
        """Finish the Enemy turn without a search result.

        The turn is passed only when the Enemy truly has no legal move, which
        the peer of a networked game can verify on its own board. Otherwise
        the first legal move (captures first) is played.
        """
        state = self._controller.state
        if state.phase != GamePhase.THINKING:
            return

        board = state.board
        moves = MoveGenerator(board).all_legal_moves((Faction.ENEMY,))
        if not moves:
            _LOGGER.info("Enemy has no legal move (%s); passing", reason)
            self._controller.pass_turn()
            return

        move = min(moves, key=lambda m: board[m.to_sq] is None)
        _LOGGER.warning("Playing fallback Enemy move %s: %s", move, reason)
        self._controller.submit_move(move.from_sq, move.to_sq, MoveOrigin.ENGINE)
