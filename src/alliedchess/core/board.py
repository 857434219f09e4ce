"""Board - piece placement on an 8x8 grid."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from alliedchess.core.enums import Faction, PieceType
from alliedchess.core.move import Move
from alliedchess.core.piece import Piece
from alliedchess.core.types import COLS, ROWS, Square, make_square

_PIECE_TYPE_COUNT = 6
_FACTION_COUNT = 3
_SQUARE_COUNT = ROWS * COLS

_BACK_RANK: tuple[PieceType, ...] = (
    PieceType.ROOK,
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.QUEEN,
    PieceType.KING,
    PieceType.BISHOP,
    PieceType.KNIGHT,
    PieceType.ROOK,
)


class Board:
    """Mutable 64-cell board with incremental piece indexes.

    Every cell holds at most one piece, and a piece lives in exactly one cell.
    """

    __slots__ = ("_squares", "_piece_bitboards", "_faction_bitboards")

    def __init__(self) -> None:
        self._squares: list[Piece | None] = [None] * _SQUARE_COUNT
        # [faction][piece_type-1] -> bitboard of occupied squares.
        self._piece_bitboards: list[list[int]] = [
            [0] * _PIECE_TYPE_COUNT for _ in range(_FACTION_COUNT)
        ]
        # [faction] -> bitboard of all occupied squares for that faction.
        self._faction_bitboards: list[int] = [0] * _FACTION_COUNT

    @staticmethod
    def _piece_type_index(piece_type: PieceType) -> int:
        return int(piece_type) - 1

    @staticmethod
    def _squares_from_bitboard(bitboard: int) -> list[Square]:
        squares: list[Square] = []
        while bitboard:
            lsb = bitboard & -bitboard
            squares.append(lsb.bit_length() - 1)
            bitboard ^= lsb
        return squares

    # -- Element access -----------------------------------------------------

    def __getitem__(self, sq: Square) -> Piece | None:
        return self._squares[sq]

    def __setitem__(self, sq: Square, piece: Piece | None) -> None:
        old_piece = self._squares[sq]
        if old_piece is piece:
            return

        mask = 1 << sq

        if old_piece is not None:
            old_faction_idx = int(old_piece.faction)
            old_piece_idx = self._piece_type_index(old_piece.piece_type)
            self._piece_bitboards[old_faction_idx][old_piece_idx] &= ~mask
            self._faction_bitboards[old_faction_idx] &= ~mask

        self._squares[sq] = piece

        if piece is None:
            return

        faction_idx = int(piece.faction)
        piece_idx = self._piece_type_index(piece.piece_type)
        self._piece_bitboards[faction_idx][piece_idx] |= mask
        self._faction_bitboards[faction_idx] |= mask

    def is_empty(self, sq: Square) -> bool:
        return self._squares[sq] is None

    # -- Query helpers ------------------------------------------------------

    def pieces(self, faction: Faction, piece_type: PieceType) -> list[Square]:
        """Squares occupied by *faction*'s *piece_type*."""
        return self._squares_from_bitboard(self.pieces_bitboard(faction, piece_type))

    def pieces_bitboard(self, faction: Faction, piece_type: PieceType) -> int:
        """Bitboard of squares occupied by *faction*'s *piece_type*."""
        return self._piece_bitboards[int(faction)][self._piece_type_index(piece_type)]

    def has_piece(self, faction: Faction, piece_type: PieceType) -> bool:
        return bool(self.pieces_bitboard(faction, piece_type))

    def all_pieces_bitboard(self, faction: Faction) -> int:
        return self._faction_bitboards[int(faction)]

    def all_pieces(self, faction: Faction) -> list[Square]:
        """All squares occupied by *faction*, in board order."""
        return self._squares_from_bitboard(self.all_pieces_bitboard(faction))

    def kings(self, faction: Faction) -> list[Square]:
        """Every king square of *faction*; normally one, possibly zero."""
        return self.pieces(faction, PieceType.KING)

    def count_kings(self, factions: tuple[Faction, ...]) -> int:
        return sum(
            self.pieces_bitboard(f, PieceType.KING).bit_count() for f in factions
        )

    # -- Mutation -----------------------------------------------------------

    def relocate(self, move: Move) -> Piece | None:
        """Raw make: move the piece to the target cell, returning any capture.

        No ``has_moved``, castling or promotion side effects are applied.
        """
        captured = self._squares[move.to_sq]
        piece = self._squares[move.from_sq]
        self[move.to_sq] = piece
        self[move.from_sq] = None
        return captured

    def restore(self, move: Move, captured: Piece | None) -> None:
        """Raw undo of :meth:`relocate`."""
        self[move.from_sq] = self._squares[move.to_sq]
        self[move.to_sq] = captured

    @contextmanager
    def simulate(self, move: Move) -> Iterator[Board]:
        """Scoped mutation: apply *move* for the duration of the block.

        The board is restored on every exit path, exceptions included.
        """
        captured = self.relocate(move)
        try:
            yield self
        finally:
            self.restore(move, captured)

    # -- Copying ------------------------------------------------------------

    def copy(self) -> Board:
        """Copy with independent piece objects."""
        b = Board()
        for sq, piece in enumerate(self._squares):
            if piece is not None:
                b[sq] = Piece(piece.piece_type, piece.faction, piece.has_moved)
        return b

    # -- Factory ------------------------------------------------------------

    @classmethod
    def initial(cls) -> Board:
        """Standard starting position.

        The Enemy holds the whole far side. On the near side B owns the
        queenside columns 0-3 and A the kingside columns 4-7, so the allies
        share A's king.
        """
        b = cls()
        for col, pt in enumerate(_BACK_RANK):
            b[make_square(0, col)] = Piece(pt, Faction.ENEMY)
            b[make_square(1, col)] = Piece(PieceType.PAWN, Faction.ENEMY)

            owner = Faction.B if col < 4 else Faction.A
            b[make_square(7, col)] = Piece(pt, owner)
            b[make_square(6, col)] = Piece(PieceType.PAWN, owner)
        return b

    # -- Dunder helpers -----------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._squares == other._squares

    def __repr__(self) -> str:
        rows: list[str] = []
        for row in range(ROWS):
            cells = []
            for col in range(COLS):
                p = self[make_square(row, col)]
                cells.append(p.code if p else "..")
            rows.append(f"{ROWS - row} {' '.join(cells)}")
        rows.append("  " + " ".join(f"{c} " for c in "abcdefgh").rstrip())
        return "\n".join(rows)
