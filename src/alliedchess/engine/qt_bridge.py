"""Qt bridge exposing the engine search through signals."""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot

from alliedchess.core.board import Board
from alliedchess.engine.minimax import MinimaxEngine
from alliedchess.engine.search import IEngine, SearchLimits

_LOGGER = logging.getLogger(__name__)


class EngineWorker(QObject):
    """Thread-affine worker that computes Enemy moves on demand.

    The search mutates the board it is handed (make/undo), so the worker must
    live on the thread that owns the game session.
    """

    best_move_ready = pyqtSignal(int, object, int, int, int)
    search_no_move = pyqtSignal(int, int, int, int)
    search_error = pyqtSignal(int, str)

    __slots__ = ("_engine", "_limits")

    def __init__(
        self,
        *,
        max_depth: int = 2,
        engine: IEngine | None = None,
    ) -> None:
        super().__init__()
        self._engine: IEngine = engine if engine is not None else MinimaxEngine()
        self._limits = SearchLimits(max_depth=max_depth)

    @property
    def limits(self) -> SearchLimits:
        return self._limits

    @pyqtSlot(object, int)
    def request_move(self, board_obj: object, request_id: int) -> None:
        """Search for the Enemy's best move on *board_obj* and emit result."""
        if not isinstance(board_obj, Board):
            self.search_error.emit(request_id, "Engine received invalid board")
            return

        try:
            result = self._engine.search(board_obj, self._limits)
        except Exception as exc:
            _LOGGER.exception("Engine search %d failed", request_id)
            self.search_error.emit(request_id, str(exc))
            return

        if result.best_move is None:
            self.search_no_move.emit(
                request_id,
                result.score,
                result.depth,
                result.nodes,
            )
            return

        self.best_move_ready.emit(
            request_id,
            result.best_move,
            result.score,
            result.depth,
            result.nodes,
        )

    @pyqtSlot(int)
    def set_limits(self, max_depth: int) -> None:
        """Update search depth (takes effect on the next search)."""
        self._limits = SearchLimits(max_depth=max_depth)
