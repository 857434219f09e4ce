"""Enemy move search (minimax + alpha-beta on the live board)."""

from __future__ import annotations

import logging
import random
from time import perf_counter

from alliedchess.core.board import Board
from alliedchess.core.enums import ALLIED_FACTIONS, Faction, PieceType
from alliedchess.core.move import Move
from alliedchess.core.move_generator import MoveGenerator
from alliedchess.core.piece import Piece
from alliedchess.core.types import ROWS, row_of
from alliedchess.engine.search import IEngine, SearchLimits, SearchResult

_LOGGER = logging.getLogger(__name__)

_INF_SCORE = 1_000_000
_MATE_SCORE = 100_000
_PAWN_ADVANCE_BONUS = 10
_MINOR_CENTER_BONUS = 10
_DEFAULT_JITTER = 10

_ENEMY_SIDE: tuple[Faction, ...] = (Faction.ENEMY,)

_PIECE_VALUES: dict[PieceType, int] = {
    PieceType.PAWN: 100,
    PieceType.KNIGHT: 320,
    PieceType.BISHOP: 330,
    PieceType.ROOK: 500,
    PieceType.QUEEN: 900,
    PieceType.KING: 20_000,
}


class MinimaxEngine(IEngine):
    """Fixed-depth searcher for the Enemy faction.

    Enemy nodes maximize and allied nodes minimize; the allied side is one
    pooled mover whose move list holds both A's and B's pieces. Moves are
    explored with a raw make/undo swap on the supplied board, so castling,
    promotion and ``has_moved`` are not modelled below the root.

    Args:
        rng: Source of the evaluation jitter. A fresh ``random.Random`` is
            used when omitted.
        jitter: Maximum absolute jitter added to each leaf score; ``0``
            makes the evaluation deterministic.
    """

    __slots__ = ("_rng", "_jitter", "_nodes")

    def __init__(
        self,
        rng: random.Random | None = None,
        jitter: int = _DEFAULT_JITTER,
    ) -> None:
        if jitter < 0:
            raise ValueError("Jitter must be >= 0")
        self._rng = rng if rng is not None else random.Random()
        self._jitter = jitter
        self._nodes = 0

    @property
    def nodes(self) -> int:
        """Nodes visited by the last search."""
        return self._nodes

    def search(self, board: Board, limits: SearchLimits) -> SearchResult:
        if limits.max_depth <= 0:
            raise ValueError("Search depth must be >= 1")

        self._nodes = 0
        started = perf_counter()

        root_moves = MoveGenerator(board).all_legal_moves(_ENEMY_SIDE)
        _LOGGER.debug("Found %d root moves", len(root_moves))
        if not root_moves:
            return SearchResult(None, 0, 0, self._nodes)

        best_move: Move | None = None
        best_score = -_INF_SCORE
        alpha = -_INF_SCORE
        beta = _INF_SCORE

        for move in self._order_moves(board, root_moves):
            captured = self.make_move(board, move)
            score = self._minimax(board, limits.max_depth - 1, False, alpha, beta)
            self.undo_move(board, move, captured)

            # Ties keep the first move found.
            if score > best_score:
                best_score = score
                best_move = move
            alpha = max(alpha, best_score)

        elapsed_ms = (perf_counter() - started) * 1000.0
        _LOGGER.info(
            "Searched %d nodes in %.2fms, best %s (eval %d)",
            self._nodes,
            elapsed_ms,
            best_move,
            best_score,
        )
        return SearchResult(best_move, best_score, limits.max_depth, self._nodes)

    def _minimax(
        self,
        board: Board,
        depth: int,
        maximizing: bool,
        alpha: int,
        beta: int,
    ) -> int:
        self._nodes += 1

        if depth == 0:
            return self.evaluate(board)

        gen = MoveGenerator(board)
        moves = gen.all_legal_moves(_ENEMY_SIDE if maximizing else ALLIED_FACTIONS)

        if not moves:
            if maximizing:
                return -_MATE_SCORE if gen.is_king_in_check(Faction.ENEMY) else 0
            in_check = gen.is_king_in_check(Faction.A) or gen.is_king_in_check(
                Faction.B
            )
            return _MATE_SCORE if in_check else 0

        ordered = self._order_moves(board, moves)

        if maximizing:
            max_eval = -_INF_SCORE
            for move in ordered:
                captured = self.make_move(board, move)
                score = self._minimax(board, depth - 1, False, alpha, beta)
                self.undo_move(board, move, captured)

                max_eval = max(max_eval, score)
                alpha = max(alpha, score)
                if beta <= alpha:
                    break
            return max_eval

        min_eval = _INF_SCORE
        for move in ordered:
            captured = self.make_move(board, move)
            score = self._minimax(board, depth - 1, True, alpha, beta)
            self.undo_move(board, move, captured)

            min_eval = min(min_eval, score)
            beta = min(beta, score)
            if beta <= alpha:
                break
        return min_eval

    # ── Make / undo ──────────────────────────────────────────────────────

    @staticmethod
    def make_move(board: Board, move: Move) -> Piece | None:
        """Swap the piece into the target cell and return what it captured."""
        return board.relocate(move)

    @staticmethod
    def undo_move(board: Board, move: Move, captured: Piece | None) -> None:
        board.restore(move, captured)

    # ── Ordering / evaluation ────────────────────────────────────────────

    def _order_moves(self, board: Board, moves: list[Move]) -> list[Move]:
        """Captures first; the sort is stable so board order is kept."""
        return sorted(moves, key=lambda move: board[move.to_sq] is None)

    def evaluate(self, board: Board) -> int:
        """Static score: positive favours the Enemy, negative the allies."""
        score = 0
        for faction in (Faction.ENEMY, Faction.A, Faction.B):
            for sq in board.all_pieces(faction):
                piece = board[sq]
                if piece is None:
                    continue
                value = _PIECE_VALUES[piece.piece_type]
                value += self._positional_bonus(piece.piece_type, faction, row_of(sq))
                if faction == Faction.ENEMY:
                    score += value
                else:
                    score -= value

        if self._jitter:
            score += self._rng.randint(-self._jitter, self._jitter)
        return score

    def _positional_bonus(self, piece_type: PieceType, faction: Faction, row: int) -> int:
        if piece_type == PieceType.PAWN:
            if faction == Faction.ENEMY:
                return row * _PAWN_ADVANCE_BONUS
            return (ROWS - 1 - row) * _PAWN_ADVANCE_BONUS
        if piece_type in (PieceType.KNIGHT, PieceType.BISHOP) and 1 < row < ROWS - 2:
            return _MINOR_CENTER_BONUS
        return 0
