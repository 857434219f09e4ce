"""Named board layouts: the standard start and debug scenarios."""

from __future__ import annotations

from collections.abc import Callable

from alliedchess.core.board import Board
from alliedchess.core.enums import Faction, PieceType
from alliedchess.core.piece import Piece
from alliedchess.core.types import make_square

STANDARD = "standard"


def _place(board: Board, row: int, col: int, piece_type: PieceType, faction: Faction) -> None:
    board[make_square(row, col)] = Piece(piece_type, faction)


def _castling_test() -> Board:
    board = Board()
    _place(board, 7, 4, PieceType.KING, Faction.A)
    _place(board, 7, 0, PieceType.ROOK, Faction.A)  # queenside
    _place(board, 7, 7, PieceType.ROOK, Faction.A)  # kingside
    _place(board, 0, 4, PieceType.KING, Faction.ENEMY)
    return board


def _promotion_test() -> Board:
    board = Board()
    _place(board, 7, 4, PieceType.KING, Faction.A)
    _place(board, 0, 4, PieceType.KING, Faction.ENEMY)
    # One step from the last row for each faction.
    _place(board, 1, 0, PieceType.PAWN, Faction.A)
    _place(board, 1, 2, PieceType.PAWN, Faction.B)
    _place(board, 6, 7, PieceType.PAWN, Faction.ENEMY)
    return board


LAYOUTS: dict[str, Callable[[], Board]] = {
    STANDARD: Board.initial,
    "castling_test": _castling_test,
    "promotion_test": _promotion_test,
}


def build_layout(name: str | None = None) -> Board:
    """Build a fresh board for the layout *name* (standard when omitted)."""
    factory = LAYOUTS.get(name or STANDARD)
    if factory is None:
        raise ValueError(f"Unknown layout: {name!r}")
    return factory()
