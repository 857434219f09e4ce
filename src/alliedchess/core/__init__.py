"""Core domain layer: pure rules logic with zero external dependencies.

Quick start::

    from alliedchess.core import Board, MoveGenerator, make_square

    board = Board.initial()
    gen = MoveGenerator(board)
    for move in gen.legal_moves(make_square(6, 4)):
        print(move)
"""

from alliedchess.core.board import Board
from alliedchess.core.enums import (
    ALLIED_FACTIONS,
    PROMOTION_TYPES,
    CastlingSide,
    Faction,
    GameOutcome,
    PieceType,
    hostile,
)
from alliedchess.core.layouts import LAYOUTS, STANDARD, build_layout
from alliedchess.core.move import Move
from alliedchess.core.move_generator import MoveGenerator
from alliedchess.core.piece import Piece
from alliedchess.core.rules import TURN_ORDER, Rules
from alliedchess.core.types import (
    COLS,
    ROWS,
    Square,
    col_of,
    is_on_board,
    is_valid_square,
    make_square,
    parse_square,
    row_of,
    square_name,
)

__all__ = [
    # Enums / constants
    "ALLIED_FACTIONS",
    "CastlingSide",
    "Faction",
    "GameOutcome",
    "PROMOTION_TYPES",
    "PieceType",
    "TURN_ORDER",
    "hostile",
    # Types / helpers
    "COLS",
    "ROWS",
    "Square",
    "col_of",
    "is_on_board",
    "is_valid_square",
    "make_square",
    "parse_square",
    "row_of",
    "square_name",
    # Domain objects
    "Board",
    "Move",
    "MoveGenerator",
    "Piece",
    "Rules",
    # Layouts
    "LAYOUTS",
    "STANDARD",
    "build_layout",
]
