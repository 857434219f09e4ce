"""Tests for GameController, the orchestrator."""

from __future__ import annotations

import pytest

from alliedchess.core.enums import Faction, GameOutcome, PieceType
from alliedchess.core.types import E2, E4, make_square
from alliedchess.game.controller import GameController
from alliedchess.game.interfaces import GamePhase, MoveOrigin
from alliedchess.game.player import AIPlayer, HumanPlayer
from alliedchess.game.state import GameState, MoveRecord

E7 = make_square(1, 4)
E5 = make_square(3, 4)


class _Recorder:
    """Collects every controller event in order."""

    def __init__(self, ctrl: GameController) -> None:
        self.moves: list[tuple[MoveRecord, MoveOrigin]] = []
        self.promotions: list[tuple[int, Faction]] = []
        self.turns: list[Faction] = []
        self.phases: list[GamePhase] = []
        self.outcomes: list[GameOutcome] = []
        self.desyncs: list[tuple[int, int]] = []
        self.engine_requests: list[GameState] = []
        ctrl.events.on_move.append(lambda r, o: self.moves.append((r, o)))
        ctrl.events.on_promotion_required.append(
            lambda sq, f: self.promotions.append((sq, f))
        )
        ctrl.events.on_turn_changed.append(self.turns.append)
        ctrl.events.on_phase_changed.append(self.phases.append)
        ctrl.events.on_game_over.append(self.outcomes.append)
        ctrl.events.on_desync.append(lambda a, b: self.desyncs.append((a, b)))


def _make_controller(
    layout: str | None = None,
    role: Faction | None = None,
) -> tuple[GameController, _Recorder]:
    """Helper: hot-seat allies against a recording Enemy player."""
    ctrl = GameController()
    rec = _Recorder(ctrl)
    if role is not None:
        ctrl.set_role(role)
    ctrl.new_game(
        {
            Faction.A: HumanPlayer(Faction.A, "Alice"),
            Faction.B: HumanPlayer(Faction.B, "Bo"),
            Faction.ENEMY: AIPlayer(on_request_move=rec.engine_requests.append),
        },
        layout=layout,
    )
    return ctrl, rec


class TestNewGame:
    def test_phase_awaiting(self) -> None:
        ctrl, rec = _make_controller()
        assert ctrl.state.phase == GamePhase.AWAITING_MOVE
        assert rec.turns == [Faction.A]

    def test_players_assigned(self) -> None:
        ctrl, _ = _make_controller()
        assert ctrl.player(Faction.A).name == "Alice"
        assert ctrl.current_player is ctrl.player(Faction.A)
        assert not ctrl.player(Faction.ENEMY).is_human

    def test_layout(self) -> None:
        ctrl, _ = _make_controller("castling_test")
        assert ctrl.state.layout == "castling_test"

    def test_restart_replaces_session(self) -> None:
        ctrl, _ = _make_controller()
        ctrl.submit_move(E2, E4)
        old_state = ctrl.state
        ctrl.restart()
        assert ctrl.state is not old_state
        assert ctrl.state.turn_index == 0
        assert ctrl.state.board[E2] is not None


class TestSelection:
    def test_select_own_piece(self) -> None:
        ctrl, _ = _make_controller()
        moves = ctrl.select_square(E2)
        assert {m.to_sq for m in moves} == {make_square(5, 4), E4}
        assert ctrl.selected_square == E2

    def test_partner_piece_not_selectable(self) -> None:
        ctrl, _ = _make_controller()
        ctrl.select_square(E2)
        assert ctrl.select_square(make_square(6, 0)) == []
        assert ctrl.selected_square is None

    def test_enemy_piece_not_selectable(self) -> None:
        ctrl, _ = _make_controller()
        assert ctrl.select_square(E7) == []

    @pytest.mark.parametrize("sq", [-1, 64, 99])
    def test_out_of_bounds(self, sq: int) -> None:
        ctrl, _ = _make_controller()
        assert ctrl.select_square(sq) == []

    def test_empty_square(self) -> None:
        ctrl, _ = _make_controller()
        assert ctrl.select_square(make_square(4, 4)) == []


class TestSubmitMove:
    def test_legal_move_accepted(self) -> None:
        ctrl, rec = _make_controller()
        assert ctrl.submit_move(E2, E4)
        assert ctrl.state.board[E4].has_moved
        assert ctrl.state.turn_index == 1
        record, origin = rec.moves[-1]
        assert (record.move.from_sq, record.move.to_sq) == (E2, E4)
        assert origin == MoveOrigin.LOCAL

    def test_engine_prompted_after_allied_move(self) -> None:
        ctrl, rec = _make_controller()
        ctrl.submit_move(E2, E4)
        assert ctrl.state.phase == GamePhase.THINKING
        assert rec.engine_requests == [ctrl.state]
        assert rec.turns == [Faction.A, Faction.ENEMY]

    @pytest.mark.parametrize(
        ("from_sq", "to_sq"),
        [
            (E2, make_square(3, 4)),  # three rows
            (-1, E4),
            (E2, 64),
            ("e2", "e4"),
            (None, E4),
            (make_square(4, 4), E4),  # empty
            (E7, E5),  # Enemy piece on A's turn
            (make_square(6, 0), make_square(4, 0)),  # B piece on A's turn
        ],
    )
    def test_bad_requests_rejected(self, from_sq: object, to_sq: object) -> None:
        ctrl, rec = _make_controller()
        before = ctrl.state.board.copy()
        assert ctrl.submit_move(from_sq, to_sq) is False  # type: ignore[arg-type]
        assert ctrl.state.board == before
        assert ctrl.state.turn_index == 0
        assert rec.moves == []

    def test_rejection_clears_selection(self) -> None:
        ctrl, _ = _make_controller()
        ctrl.select_square(E2)
        ctrl.submit_move(E2, make_square(2, 4))
        assert ctrl.selected_square is None

    def test_local_move_rejected_while_engine_thinks(self) -> None:
        ctrl, _ = _make_controller()
        ctrl.submit_move(E2, E4)
        assert not ctrl.submit_move(E7, E5)
        assert not ctrl.submit_move(make_square(6, 3), make_square(4, 3))

    def test_engine_move_accepted_while_thinking(self) -> None:
        ctrl, rec = _make_controller()
        ctrl.submit_move(E2, E4)
        assert ctrl.submit_move(E7, E5, MoveOrigin.ENGINE)
        assert rec.moves[-1][1] == MoveOrigin.ENGINE
        assert ctrl.state.current_faction == Faction.B
        assert ctrl.state.phase == GamePhase.AWAITING_MOVE

    def test_engine_move_rejected_on_allied_turn(self) -> None:
        ctrl, _ = _make_controller()
        assert not ctrl.submit_move(E7, E5, MoveOrigin.ENGINE)

    def test_pass_turn_skips_enemy(self) -> None:
        ctrl, rec = _make_controller()
        ctrl.submit_move(E2, E4)
        ctrl.pass_turn()
        assert ctrl.state.current_faction == Faction.B
        assert ctrl.state.phase == GamePhase.AWAITING_MOVE
        assert rec.turns[-1] == Faction.B


class TestPromotion:
    def test_promotion_suspends_then_resumes(self) -> None:
        ctrl, rec = _make_controller("promotion_test")
        a8 = make_square(0, 0)
        assert ctrl.submit_move(make_square(1, 0), a8)

        assert rec.promotions == [(a8, Faction.A)]
        assert ctrl.state.phase == GamePhase.AWAITING_PROMOTION
        assert rec.moves == []
        assert ctrl.state.turn_index == 0
        assert not ctrl.submit_move(make_square(7, 4), make_square(7, 3))

        assert not ctrl.complete_promotion(PieceType.KING)
        assert ctrl.complete_promotion(PieceType.QUEEN)

        record, origin = rec.moves[-1]
        assert record.promotion == PieceType.QUEEN
        assert origin == MoveOrigin.LOCAL
        assert ctrl.state.board[a8].piece_type == PieceType.QUEEN
        assert ctrl.state.phase == GamePhase.THINKING

    def test_complete_without_pending(self) -> None:
        ctrl, _ = _make_controller()
        assert not ctrl.complete_promotion(PieceType.QUEEN)


class TestGameOver:
    def test_victory(self, make_board) -> None:
        ctrl, rec = _make_controller()
        ctrl.state.board = make_board({(7, 4): "Ak", (1, 4): "Aq", (0, 4): "Ek"})
        assert ctrl.submit_move(make_square(1, 4), make_square(0, 4))

        assert rec.outcomes == [GameOutcome.VICTORY]
        assert rec.phases[-1] == GamePhase.GAME_OVER
        assert len(rec.moves) == 1
        assert rec.engine_requests == []
        assert not ctrl.submit_move(make_square(7, 4), make_square(7, 3))


class TestRescue:
    def test_partner_may_pick_up_trapped_ally(self, make_board) -> None:
        ctrl, _ = _make_controller()
        ctrl.state.board = make_board(
            {(7, 7): "Ak", (7, 0): "Er", (6, 0): "Er", (5, 3): "Br", (0, 4): "Ek"}
        )
        ctrl.state.turn_index = 2
        assert ctrl.can_select_piece(make_square(7, 7))
        assert ctrl.submit_move(make_square(5, 3), make_square(7, 3))

    def test_no_takeover_when_ally_is_safe(self) -> None:
        ctrl, _ = _make_controller()
        ctrl.state.turn_index = 2
        assert not ctrl.can_select_piece(E2)


class TestMultiplayer:
    def test_role_must_be_allied(self) -> None:
        with pytest.raises(ValueError):
            GameController().set_role(Faction.ENEMY)

    def test_waiting_blocks_input(self) -> None:
        ctrl, _ = _make_controller(role=Faction.A)
        ctrl.set_waiting(True)
        assert ctrl.select_square(E2) == []
        assert not ctrl.submit_move(E2, E4)

    def test_role_a_moves_and_runs_first_enemy_slot(self) -> None:
        ctrl, rec = _make_controller(role=Faction.A)
        assert ctrl.state.phase == GamePhase.AWAITING_MOVE
        assert ctrl.submit_move(E2, E4)
        assert ctrl.state.phase == GamePhase.THINKING
        assert len(rec.engine_requests) == 1

    def test_role_a_waits_on_partner_and_second_enemy_slot(self) -> None:
        ctrl, rec = _make_controller(role=Faction.A)
        ctrl.submit_move(E2, E4)
        ctrl.submit_move(E7, E5, MoveOrigin.ENGINE)
        assert ctrl.state.phase == GamePhase.AWAITING_REMOTE
        assert not ctrl.submit_move(make_square(6, 3), make_square(4, 3))

        assert ctrl.apply_remote_move(make_square(6, 3), make_square(4, 3))
        assert ctrl.state.turn_index == 3
        assert ctrl.state.phase == GamePhase.AWAITING_REMOTE
        assert len(rec.engine_requests) == 1

    def test_role_b_waits_for_a_and_enemy(self) -> None:
        ctrl, rec = _make_controller(role=Faction.B)
        assert ctrl.state.phase == GamePhase.AWAITING_REMOTE
        assert not ctrl.submit_move(E2, E4)
        assert not ctrl.select_square(E2)

        assert ctrl.apply_remote_move(E2, E4)
        assert rec.moves[-1][1] == MoveOrigin.REMOTE
        assert ctrl.state.phase == GamePhase.AWAITING_REMOTE
        assert rec.engine_requests == []

        assert ctrl.apply_remote_move(E7, E5)
        assert ctrl.state.current_faction == Faction.B
        assert ctrl.state.phase == GamePhase.AWAITING_MOVE

    def test_role_b_runs_second_enemy_slot(self) -> None:
        ctrl, rec = _make_controller(role=Faction.B)
        ctrl.apply_remote_move(E2, E4)
        ctrl.apply_remote_move(E7, E5)
        assert ctrl.submit_move(make_square(6, 3), make_square(4, 3))
        assert ctrl.state.phase == GamePhase.THINKING
        assert len(rec.engine_requests) == 1

    def test_peer_passes_stalemated_enemy_slot(self, make_board) -> None:
        ctrl, rec = _make_controller(role=Faction.B)
        ctrl.state.board = make_board(
            {(0, 0): "Ek", (2, 3): "Aq", (7, 7): "Ak", (7, 1): "Br"}
        )
        assert ctrl.apply_remote_move(make_square(2, 3), make_square(1, 2))

        assert ctrl.state.turn_index == 2
        assert ctrl.state.phase == GamePhase.AWAITING_MOVE
        assert rec.engine_requests == []

    def test_peer_waits_for_enemy_slot_with_moves(self) -> None:
        ctrl, _ = _make_controller(role=Faction.B)
        ctrl.apply_remote_move(E2, E4)
        assert ctrl.state.turn_index == 1
        assert ctrl.state.phase == GamePhase.AWAITING_REMOTE

    def test_illegal_remote_move_fires_desync(self) -> None:
        ctrl, rec = _make_controller(role=Faction.B)
        before = ctrl.state.board.copy()
        assert not ctrl.apply_remote_move(E2, make_square(2, 4))
        assert rec.desyncs == [(E2, make_square(2, 4))]
        assert ctrl.state.board == before
        assert ctrl.state.turn_index == 0

    def test_remote_move_when_local_turn_is_desync(self) -> None:
        ctrl, rec = _make_controller(role=Faction.A)
        assert not ctrl.apply_remote_move(E2, E4)
        assert rec.desyncs == [(E2, E4)]

    def test_remote_promotion_requires_piece(self) -> None:
        ctrl, rec = _make_controller("promotion_test", role=Faction.B)
        assert not ctrl.apply_remote_move(make_square(1, 0), make_square(0, 0))
        assert len(rec.desyncs) == 1

        assert ctrl.apply_remote_move(
            make_square(1, 0), make_square(0, 0), PieceType.ROOK
        )
        assert ctrl.state.board[make_square(0, 0)].piece_type == PieceType.ROOK
        assert rec.promotions == []
        assert rec.moves[-1][0].promotion == PieceType.ROOK
        assert ctrl.state.turn_index == 1
