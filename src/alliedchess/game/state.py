"""Game state machine: board, turn rotation, promotion and outcome."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from alliedchess.core.board import Board
from alliedchess.core.enums import (
    PROMOTION_TYPES,
    CastlingSide,
    Faction,
    GameOutcome,
    PieceType,
)
from alliedchess.core.layouts import STANDARD, build_layout
from alliedchess.core.move import Move
from alliedchess.core.move_generator import MoveGenerator
from alliedchess.core.piece import Piece
from alliedchess.core.rules import Rules
from alliedchess.core.types import COLS, Square, col_of, make_square, row_of
from alliedchess.game.interfaces import GamePhase

_LOGGER = logging.getLogger(__name__)


@dataclass
class MoveRecord:
    """The last completed (or promotion-pending) move."""

    move: Move
    faction: Faction
    piece_type: PieceType
    captured: PieceType | None = None
    promotion: PieceType | None = None

    @property
    def is_castling(self) -> bool:
        return self.move.castling is not None


@dataclass
class GameState:
    """One game session: board, turn index, phase and outcome.

    This is a pure data/logic class with no threading or I/O. Callers are
    responsible for legality checks before :meth:`apply_move`.
    """

    board: Board = field(default_factory=Board, init=False)
    turn_index: int = field(default=0, init=False)
    phase: GamePhase = field(default=GamePhase.NOT_STARTED, init=False)
    outcome: GameOutcome = field(default=GameOutcome.IN_PROGRESS, init=False)
    last_move: MoveRecord | None = field(default=None, init=False)
    pending_promotion: Square | None = field(default=None, init=False)
    layout: str = field(default=STANDARD, init=False)

    # ── Initialisation ───────────────────────────────────────────────────

    def setup(self, layout: str | None = None) -> None:
        """Initialise (or reset) the session on a named layout."""
        self.layout = layout or STANDARD
        self.board = build_layout(self.layout)
        self.turn_index = 0
        self.phase = GamePhase.AWAITING_MOVE
        self.outcome = GameOutcome.IN_PROGRESS
        self.last_move = None
        self.pending_promotion = None

    # ── Move application ─────────────────────────────────────────────────

    def apply_move(self, move: Move) -> MoveRecord:
        """Apply a validated move and return its record.

        An allied pawn reaching the last row leaves the turn suspended until
        :meth:`complete_promotion`; everything else completes immediately.
        """
        board = self.board
        piece = board[move.from_sq]
        if piece is None:
            raise ValueError(f"No piece on {move.from_sq}")

        target = board[move.to_sq]
        record = MoveRecord(
            move=move,
            faction=piece.faction,
            piece_type=piece.piece_type,
            captured=target.piece_type if target is not None else None,
        )

        if piece.piece_type == PieceType.KING and move.column_span == 2:
            self._move_castling_rook(move)
            if move.castling is None:
                record.move = Move(move.from_sq, move.to_sq, self._castling_side(move))

        board.relocate(move)
        piece.has_moved = True
        self.last_move = record

        if Rules.needs_promotion(board, move.to_sq):
            if piece.faction == Faction.ENEMY:
                self._promote(move.to_sq, PieceType.QUEEN)
                record.promotion = PieceType.QUEEN
                _LOGGER.info("Enemy pawn promoted to queen on %s", move.to_sq)
            else:
                self.pending_promotion = move.to_sq
                self.phase = GamePhase.AWAITING_PROMOTION
                return record

        self._finish_move()
        return record

    def complete_promotion(self, piece_type: PieceType) -> bool:
        """Resolve a pending promotion; invalid choices leave it pending."""
        sq = self.pending_promotion
        if sq is None or piece_type not in PROMOTION_TYPES:
            return False

        self._promote(sq, piece_type)
        self.pending_promotion = None
        if self.last_move is not None:
            self.last_move.promotion = piece_type
        self.phase = GamePhase.AWAITING_MOVE
        self._finish_move()
        return True

    def pass_turn(self) -> None:
        """Advance the rotation without a move (the mover had none)."""
        if self.is_game_over:
            return
        self.turn_index = Rules.next_turn(self.turn_index)

    # ── Query helpers ────────────────────────────────────────────────────

    @property
    def current_faction(self) -> Faction:
        return Rules.faction_for_turn(self.turn_index)

    @property
    def is_game_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    @property
    def is_promotion_pending(self) -> bool:
        return self.pending_promotion is not None

    def legal_moves(self, sq: Square) -> list[Move]:
        """Legal moves for the piece on *sq*."""
        return MoveGenerator(self.board).legal_moves(sq)

    def is_in_check(self, faction: Faction) -> bool:
        return Rules.is_in_check(self.board, faction)

    # ── Internal ─────────────────────────────────────────────────────────

    def _finish_move(self) -> None:
        outcome = Rules.game_outcome(self.board)
        if outcome != GameOutcome.IN_PROGRESS:
            self.outcome = outcome
            self.phase = GamePhase.GAME_OVER
            _LOGGER.info("Game over: %s", outcome.name)
            return
        self.turn_index = Rules.next_turn(self.turn_index)

    def _promote(self, sq: Square, piece_type: PieceType) -> None:
        pawn = self.board[sq]
        assert pawn is not None
        self.board[sq] = Piece(piece_type, pawn.faction, has_moved=True)

    @staticmethod
    def _castling_side(move: Move) -> CastlingSide:
        if col_of(move.to_sq) > col_of(move.from_sq):
            return CastlingSide.KINGSIDE
        return CastlingSide.QUEENSIDE

    def _move_castling_rook(self, move: Move) -> None:
        row = row_of(move.from_sq)
        kingside = self._castling_side(move) == CastlingSide.KINGSIDE
        rook_from = make_square(row, COLS - 1 if kingside else 0)
        # The rook lands on the square the king crossed.
        rook_to = make_square(row, (col_of(move.from_sq) + col_of(move.to_sq)) // 2)

        rook = self.board[rook_from]
        assert rook is not None
        self.board[rook_to] = rook
        self.board[rook_from] = None
        rook.has_moved = True
