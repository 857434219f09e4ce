"""High-level rules: rescue rule, promotion and terminal detection."""

from __future__ import annotations

from alliedchess.core.board import Board
from alliedchess.core.enums import ALLIED_FACTIONS, Faction, GameOutcome, PieceType
from alliedchess.core.move_generator import MoveGenerator, promotion_row
from alliedchess.core.types import Square, row_of

# Slot order of the four-step rotation.
TURN_ORDER: tuple[Faction, ...] = (Faction.A, Faction.ENEMY, Faction.B, Faction.ENEMY)


class Rules:
    """Static rule-checker that operates on a :class:`Board`."""

    @staticmethod
    def faction_for_turn(turn_index: int) -> Faction:
        return TURN_ORDER[turn_index % len(TURN_ORDER)]

    @staticmethod
    def next_turn(turn_index: int) -> int:
        return (turn_index + 1) % len(TURN_ORDER)

    @staticmethod
    def is_in_check(board: Board, faction: Faction) -> bool:
        return MoveGenerator(board).is_king_in_check(faction)

    @staticmethod
    def can_rescue_ally(board: Board, rescuer: Faction, ally: Faction) -> bool:
        """Whether *ally* can still help itself: any of its pieces has a move.

        *rescuer* is the faction whose turn it is; it only matters to callers
        deciding if the rescuer may take over the ally's pieces.
        """
        del rescuer
        return MoveGenerator(board).has_legal_move(ally)

    @staticmethod
    def may_control(board: Board, mover: Faction, owner: Faction) -> bool:
        """May *mover*, on its own turn, select a piece belonging to *owner*?

        A faction always controls its own pieces. It takes over its ally's
        pieces only while the ally is in check with no legal escape.
        """
        if mover == Faction.ENEMY or owner == Faction.ENEMY:
            return mover == owner
        if owner == mover:
            return True
        if owner != mover.ally:
            return False
        gen = MoveGenerator(board)
        if not gen.is_king_in_check(owner):
            return False
        return not Rules.can_rescue_ally(board, mover, owner)

    @staticmethod
    def needs_promotion(board: Board, sq: Square) -> bool:
        """Does the piece on *sq* stand on its promotion row as a pawn?"""
        piece = board[sq]
        if piece is None or piece.piece_type != PieceType.PAWN:
            return False
        return row_of(sq) == promotion_row(piece.faction)

    @staticmethod
    def game_outcome(board: Board) -> GameOutcome:
        """Terminal detection by counting kings on each team."""
        if board.count_kings(ALLIED_FACTIONS) == 0:
            return GameOutcome.DEFEAT
        if board.count_kings((Faction.ENEMY,)) == 0:
            return GameOutcome.VICTORY
        return GameOutcome.IN_PROGRESS
