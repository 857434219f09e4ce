"""Console input adapter: reads moves such as ``e2e4`` for the human side."""

from __future__ import annotations

import logging
from collections.abc import Callable

from alliedchess.core.enums import PROMOTION_TYPES, Faction, GameOutcome, PieceType
from alliedchess.core.types import Square, parse_square, square_name
from alliedchess.game.controller import GameController
from alliedchess.game.interfaces import GamePhase, MoveOrigin
from alliedchess.game.state import MoveRecord

_LOGGER = logging.getLogger(__name__)

_HELP = (
    "Enter moves as <from><to>, e.g. e2e4. "
    "Other commands: moves <square>, restart, help, quit."
)
_OUTCOME_TEXT = {
    GameOutcome.VICTORY: "Victory! The Enemy king has fallen.",
    GameOutcome.DEFEAT: "Defeat. The allied king has fallen.",
}


def _default_schedule(callback: Callable[[], None]) -> None:
    from PyQt6.QtCore import QTimer

    QTimer.singleShot(0, callback)


class ConsoleAdapter:
    """Bridges a text terminal to a :class:`GameController`.

    Prompts are scheduled on the event loop rather than called inline so the
    Enemy timer can fire between human turns.
    """

    __slots__ = (
        "_controller",
        "_read_line",
        "_write",
        "_schedule",
        "_on_quit",
        "_on_restart",
        "_prompt_scheduled",
    )

    def __init__(
        self,
        controller: GameController,
        *,
        read_line: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
        schedule: Callable[[Callable[[], None]], None] = _default_schedule,
        on_quit: Callable[[], None] | None = None,
        on_restart: Callable[[], None] | None = None,
    ) -> None:
        self._controller = controller
        self._read_line = read_line
        self._write = write
        self._schedule = schedule
        self._on_quit = on_quit
        self._on_restart = on_restart
        self._prompt_scheduled = False

    def attach(self) -> None:
        events = self._controller.events
        events.on_move.append(self._on_move)
        events.on_phase_changed.append(self._on_phase_changed)
        events.on_promotion_required.append(self._on_promotion_required)
        events.on_game_over.append(self._on_game_over)

    # ── Prompting ────────────────────────────────────────────────────────

    def prompt(self) -> None:
        """Read one line for the human on move and act on it."""
        self._prompt_scheduled = False
        if self._controller.waiting:
            return
        state = self._controller.state
        if state.phase == GamePhase.AWAITING_PROMOTION:
            label = "Promote to (q/r/b/n): "
        elif state.phase == GamePhase.AWAITING_MOVE:
            self._write(repr(state.board))
            faction = state.current_faction
            check = " (check)" if state.is_in_check(faction) else ""
            label = f"{faction} to move{check}: "
        else:
            return

        try:
            line = self._read_line(label)
        except EOFError:
            self._quit()
            return

        self.handle_line(line)
        self._schedule_prompt()

    def handle_line(self, line: str) -> bool:
        """Interpret one line of input. Returns True if it changed the game."""
        text = line.strip().lower()
        if not text:
            return False
        if text in ("quit", "exit"):
            self._quit()
            return False
        if text == "help":
            self._write(_HELP)
            return False
        if text == "restart":
            if self._on_restart is not None:
                self._on_restart()
            else:
                self._controller.restart()
            return True

        if self._controller.state.phase == GamePhase.AWAITING_PROMOTION:
            return self._handle_promotion(text)
        if text.startswith("moves "):
            self._show_moves(text[6:].strip())
            return False
        return self._handle_move(text)

    def _handle_promotion(self, text: str) -> bool:
        try:
            piece_type = PieceType.from_char(text[:1])
        except ValueError:
            piece_type = None
        if piece_type not in PROMOTION_TYPES or len(text) != 1:
            self._write("Choose one of q, r, b, n.")
            return False
        assert piece_type is not None
        return self._controller.complete_promotion(piece_type)

    def _handle_move(self, text: str) -> bool:
        squares = self._parse_move(text)
        if squares is None:
            self._write(f"Could not read {text!r}. {_HELP}")
            return False
        from_sq, to_sq = squares
        if not self._controller.submit_move(from_sq, to_sq, MoveOrigin.LOCAL):
            self._write("Illegal move.")
            return False
        return True

    def _show_moves(self, name: str) -> None:
        try:
            sq = parse_square(name)
        except ValueError:
            self._write(f"Unknown square {name!r}.")
            return
        moves = self._controller.select_square(sq)
        if not moves:
            self._write("No moves for that square.")
            return
        self._write(" ".join(square_name(m.to_sq) for m in moves))

    @staticmethod
    def _parse_move(text: str) -> tuple[Square, Square] | None:
        text = text.replace("-", "").replace(" ", "")
        if len(text) != 4:
            return None
        try:
            return parse_square(text[:2]), parse_square(text[2:])
        except ValueError:
            return None

    def _schedule_prompt(self) -> None:
        if self._prompt_scheduled or self._controller.waiting:
            return
        if self._controller.state.phase not in (
            GamePhase.AWAITING_MOVE,
            GamePhase.AWAITING_PROMOTION,
        ):
            return
        self._prompt_scheduled = True
        self._schedule(self.prompt)

    def _quit(self) -> None:
        _LOGGER.info("Console closed")
        if self._on_quit is not None:
            self._on_quit()

    # ── Controller events ────────────────────────────────────────────────

    def _on_move(self, record: MoveRecord, origin: MoveOrigin) -> None:
        if origin != MoveOrigin.LOCAL:
            self._write(f"{record.faction} plays {record.move}")

    def _on_phase_changed(self, phase: GamePhase) -> None:
        if phase in (GamePhase.AWAITING_MOVE, GamePhase.AWAITING_PROMOTION):
            self._schedule_prompt()

    def _on_promotion_required(self, sq: Square, faction: Faction) -> None:
        self._write(f"{faction} pawn reached {square_name(sq)}.")

    def _on_game_over(self, outcome: GameOutcome) -> None:
        self._write(repr(self._controller.state.board))
        self._write(_OUTCOME_TEXT.get(outcome, outcome.name))
        self._quit()
