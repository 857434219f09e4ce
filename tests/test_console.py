"""Tests for the console input adapter."""

from __future__ import annotations

from collections.abc import Callable

from alliedchess.console import ConsoleAdapter
from alliedchess.core.enums import Faction, PieceType
from alliedchess.core.types import E2, E4, make_square
from alliedchess.game.controller import GameController
from alliedchess.game.interfaces import GamePhase, MoveOrigin
from alliedchess.game.player import AIPlayer, HumanPlayer


class _Harness:
    def __init__(self, lines: list[str] | None = None, layout: str | None = None) -> None:
        self.lines = list(lines or [])
        self.output: list[str] = []
        self.scheduled: list[Callable[[], None]] = []
        self.quit_calls = 0
        self.controller = GameController()
        self.console = ConsoleAdapter(
            self.controller,
            read_line=self._read,
            write=self.output.append,
            schedule=self.scheduled.append,
            on_quit=self._quit,
        )
        self.console.attach()
        self.controller.new_game(
            {
                Faction.A: HumanPlayer(Faction.A),
                Faction.B: HumanPlayer(Faction.B),
                Faction.ENEMY: AIPlayer(),
            },
            layout=layout,
        )

    def _read(self, _prompt: str) -> str:
        if not self.lines:
            raise EOFError
        return self.lines.pop(0)

    def _quit(self) -> None:
        self.quit_calls += 1


class TestConsoleAdapter:
    def test_prompt_scheduled_once_on_new_game(self) -> None:
        h = _Harness()
        assert len(h.scheduled) == 1

    def test_move_line(self) -> None:
        h = _Harness()
        assert h.console.handle_line("e2e4")
        assert h.controller.state.board[E4] is not None
        assert h.controller.state.phase == GamePhase.THINKING

    def test_move_with_dash(self) -> None:
        h = _Harness()
        assert h.console.handle_line(" e2-e4 ")

    def test_illegal_move_reported(self) -> None:
        h = _Harness()
        assert not h.console.handle_line("e2e5")
        assert h.output[-1] == "Illegal move."

    def test_garbage_reported(self) -> None:
        h = _Harness()
        assert not h.console.handle_line("castle please")
        assert "Could not read" in h.output[-1]

    def test_moves_command_lists_targets(self) -> None:
        h = _Harness()
        h.console.handle_line("moves e2")
        assert set(h.output[-1].split()) == {"e3", "e4"}

    def test_promotion(self) -> None:
        h = _Harness(layout="promotion_test")
        h.console.handle_line("a7a8")
        assert h.controller.state.phase == GamePhase.AWAITING_PROMOTION
        assert not h.console.handle_line("k")
        assert h.console.handle_line("n")
        piece = h.controller.state.board[make_square(0, 0)]
        assert piece is not None and piece.piece_type == PieceType.KNIGHT

    def test_prompt_reads_and_reschedules(self) -> None:
        h = _Harness(lines=["e2e5"])
        h.scheduled.clear()
        h.console.prompt()
        assert h.output[-1] == "Illegal move."
        assert len(h.scheduled) == 1

    def test_prompt_prints_board(self) -> None:
        h = _Harness(lines=["e2e4"])
        h.console.prompt()
        assert any(line.startswith("8 Er") for line in h.output)
        assert h.controller.state.board[E2] is None

    def test_eof_quits(self) -> None:
        h = _Harness()
        h.console.prompt()
        assert h.quit_calls == 1

    def test_quit_command(self) -> None:
        h = _Harness()
        h.console.handle_line("quit")
        assert h.quit_calls == 1

    def test_restart_command(self) -> None:
        h = _Harness()
        h.console.handle_line("e2e4")
        h.console.handle_line("restart")
        assert h.controller.state.turn_index == 0

    def test_restart_hook_replaces_local_restart(self) -> None:
        h = _Harness()
        requests: list[str] = []
        h.console = ConsoleAdapter(
            h.controller,
            write=h.output.append,
            schedule=h.scheduled.append,
            on_restart=lambda: requests.append("restart"),
        )
        h.console.handle_line("e2e4")
        h.console.handle_line("restart")
        assert requests == ["restart"]
        assert h.controller.state.turn_index == 1

    def test_no_prompt_while_waiting_for_ally(self) -> None:
        h = _Harness(lines=["e2e4"])
        h.controller.set_waiting(True)
        h.scheduled.clear()
        h.console.prompt()
        assert h.output == []
        assert h.lines == ["e2e4"]
        assert h.scheduled == []

    def test_engine_moves_echoed(self) -> None:
        h = _Harness()
        h.console.handle_line("e2e4")
        h.controller.submit_move(make_square(1, 4), make_square(3, 4), MoveOrigin.ENGINE)
        assert h.output[-1] == "Enemy plays e7e5"

    def test_game_over_quits(self, make_board) -> None:
        h = _Harness()
        h.controller.state.board = make_board({(7, 4): "Ak", (1, 4): "Aq", (0, 4): "Ek"})
        h.console.handle_line("e7e8")
        assert h.output[-1].startswith("Victory")
        assert h.quit_calls == 1
