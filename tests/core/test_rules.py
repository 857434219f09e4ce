"""Tests for Rules: turn rotation, rescue rule, promotion, terminal detection."""

import pytest

from alliedchess.core.board import Board
from alliedchess.core.enums import Faction, GameOutcome
from alliedchess.core.rules import TURN_ORDER, Rules
from alliedchess.core.types import E1, E8, make_square


def _trapped_a_king(make_board, *, escape: bool = False) -> Board:
    """A's king checked along the back row; B's rook can block on d1.

    Without *escape* a second Enemy rook seals row 2 so A has no move.
    """
    placements = {
        (7, 7): "Ak",
        (7, 0): "Er",
        (5, 3): "Br",
        (0, 4): "Ek",
    }
    if not escape:
        placements[(6, 0)] = "Er"
    return make_board(placements)


class TestTurnOrder:
    def test_rotation(self) -> None:
        assert TURN_ORDER == (Faction.A, Faction.ENEMY, Faction.B, Faction.ENEMY)
        assert [Rules.faction_for_turn(i) for i in range(4)] == list(TURN_ORDER)

    def test_next_turn_wraps(self) -> None:
        assert Rules.next_turn(0) == 1
        assert Rules.next_turn(3) == 0


class TestRescueRule:
    def test_ally_without_moves_cannot_rescue_itself(self, make_board) -> None:
        b = _trapped_a_king(make_board)
        assert Rules.is_in_check(b, Faction.A)
        assert not Rules.can_rescue_ally(b, Faction.B, Faction.A)

    def test_ally_with_escape_can_rescue_itself(self, make_board) -> None:
        b = _trapped_a_king(make_board, escape=True)
        assert Rules.is_in_check(b, Faction.A)
        assert Rules.can_rescue_ally(b, Faction.B, Faction.A)

    def test_partner_takes_over_trapped_ally(self, make_board) -> None:
        b = _trapped_a_king(make_board)
        assert Rules.may_control(b, Faction.B, Faction.A)

    def test_no_takeover_while_ally_can_move(self, make_board) -> None:
        b = _trapped_a_king(make_board, escape=True)
        assert not Rules.may_control(b, Faction.B, Faction.A)

    def test_no_takeover_without_check(self) -> None:
        b = Board.initial()
        assert not Rules.may_control(b, Faction.A, Faction.B)
        assert not Rules.may_control(b, Faction.B, Faction.A)

    def test_own_pieces_always_controlled(self, make_board) -> None:
        b = _trapped_a_king(make_board)
        assert Rules.may_control(b, Faction.B, Faction.B)
        assert Rules.may_control(b, Faction.A, Faction.A)
        assert Rules.may_control(b, Faction.ENEMY, Faction.ENEMY)

    def test_enemy_pieces_never_controlled_by_allies(self, make_board) -> None:
        b = _trapped_a_king(make_board)
        assert not Rules.may_control(b, Faction.A, Faction.ENEMY)
        assert not Rules.may_control(b, Faction.ENEMY, Faction.A)

    def test_trapped_ally_king_still_cannot_move(self, make_board) -> None:
        from alliedchess.core.move_generator import MoveGenerator

        b = _trapped_a_king(make_board)
        gen = MoveGenerator(b)
        assert gen.legal_moves(make_square(7, 7)) == []
        blocks = {m.to_sq for m in gen.legal_moves(make_square(5, 3))}
        assert blocks == {make_square(7, 3)}


class TestPromotion:
    @pytest.mark.parametrize(
        ("code", "row", "expected"),
        [
            ("Ap", 0, True),
            ("Bp", 0, True),
            ("Ep", 7, True),
            ("Ep", 0, False),
            ("Ap", 7, False),
            ("Aq", 0, False),
        ],
    )
    def test_needs_promotion(self, make_board, code: str, row: int, expected: bool) -> None:
        b = make_board({(row, 2): code})
        assert Rules.needs_promotion(b, make_square(row, 2)) is expected

    def test_empty_square(self) -> None:
        assert not Rules.needs_promotion(Board(), make_square(0, 0))


class TestOutcome:
    def test_start_in_progress(self) -> None:
        assert Rules.game_outcome(Board.initial()) == GameOutcome.IN_PROGRESS

    def test_victory_when_enemy_king_gone(self) -> None:
        b = Board.initial()
        b[E8] = None
        assert Rules.game_outcome(b) == GameOutcome.VICTORY

    def test_defeat_when_allied_king_gone(self) -> None:
        b = Board.initial()
        b[E1] = None
        assert Rules.game_outcome(b) == GameOutcome.DEFEAT

    def test_defeat_checked_first(self) -> None:
        b = Board.initial()
        b[E1] = None
        b[E8] = None
        assert Rules.game_outcome(b) == GameOutcome.DEFEAT
