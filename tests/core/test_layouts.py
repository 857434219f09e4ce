"""Tests for named board layouts."""

import pytest

from alliedchess.core.board import Board
from alliedchess.core.enums import Faction, PieceType
from alliedchess.core.layouts import LAYOUTS, STANDARD, build_layout
from alliedchess.core.piece import Piece
from alliedchess.core.types import make_square


class TestLayouts:
    def test_default_is_standard(self) -> None:
        assert build_layout() == Board.initial()
        assert build_layout(STANDARD) == Board.initial()

    def test_each_call_builds_fresh_board(self) -> None:
        first = build_layout(STANDARD)
        second = build_layout(STANDARD)
        assert first == second
        assert first[make_square(7, 4)] is not second[make_square(7, 4)]

    def test_unknown_layout(self) -> None:
        with pytest.raises(ValueError):
            build_layout("sixteen_columns")

    def test_castling_layout(self) -> None:
        b = build_layout("castling_test")
        assert b[make_square(7, 4)] == Piece(PieceType.KING, Faction.A)
        assert b[make_square(7, 0)] == Piece(PieceType.ROOK, Faction.A)
        assert b[make_square(7, 7)] == Piece(PieceType.ROOK, Faction.A)
        assert b.kings(Faction.ENEMY) == [make_square(0, 4)]
        assert all(b.is_empty(make_square(7, col)) for col in (1, 2, 3, 5, 6))

    def test_promotion_layout_has_a_pawn_per_faction(self) -> None:
        b = build_layout("promotion_test")
        for faction in Faction:
            assert len(b.pieces(faction, PieceType.PAWN)) == 1

    @pytest.mark.parametrize("name", sorted(LAYOUTS))
    def test_every_layout_has_both_kings(self, name: str) -> None:
        b = build_layout(name)
        assert b.count_kings((Faction.A, Faction.B)) == 1
        assert b.count_kings((Faction.ENEMY,)) == 1
