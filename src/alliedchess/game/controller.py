"""GameController, the central orchestrator of an allied game.

Coordinates: Players, GameState, Rules, the optional network role.
Emits events via simple callbacks so the console / network / tests can
subscribe.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from alliedchess.core.enums import (
    PROMOTION_TYPES,
    Faction,
    GameOutcome,
    PieceType,
)
from alliedchess.core.move import Move
from alliedchess.core.move_generator import MoveGenerator, promotion_row
from alliedchess.core.rules import Rules
from alliedchess.core.types import Square, is_valid_square, row_of
from alliedchess.game.interfaces import (
    GamePhase,
    IGameController,
    IPlayer,
    MoveOrigin,
)
from alliedchess.game.state import GameState, MoveRecord

_LOGGER = logging.getLogger(__name__)

# ── Event definitions ────────────────────────────────────────────────────────

MoveCallback = Callable[[MoveRecord, MoveOrigin], None]
PromotionCallback = Callable[[Square, Faction], None]  # square, pawn owner
TurnCallback = Callable[[Faction], None]
GameOverCallback = Callable[[GameOutcome], None]
PhaseCallback = Callable[[GamePhase], None]
DesyncCallback = Callable[[Square, Square], None]  # rejected from, to

# Turn slots whose Enemy reply each allied role computes.
_ENEMY_SLOT_OWNER: dict[int, Faction] = {1: Faction.A, 3: Faction.B}


@dataclass
class GameEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_move: list[MoveCallback] = field(default_factory=list)
    on_promotion_required: list[PromotionCallback] = field(default_factory=list)
    on_turn_changed: list[TurnCallback] = field(default_factory=list)
    on_game_over: list[GameOverCallback] = field(default_factory=list)
    on_phase_changed: list[PhaseCallback] = field(default_factory=list)
    on_desync: list[DesyncCallback] = field(default_factory=list)


# ── Controller ───────────────────────────────────────────────────────────────


class GameController(IGameController):
    """Orchestrates a full game: validates moves, rotates turns, resolves
    promotions, notifies listeners.

    Thread-safety: methods are designed to be called from a single thread
    (the main thread). Engine results and relay messages both arrive on
    that thread through the Qt event loop.
    """

    __slots__ = (
        "_state",
        "_players",
        "_role",
        "_waiting",
        "_selected",
        "_selected_moves",
        "_promotion_origin",
        "events",
    )

    def __init__(self) -> None:
        self._state = GameState()
        self._players: dict[Faction, IPlayer] = {}
        self._role: Faction | None = None
        self._waiting = False
        self._selected: Square | None = None
        self._selected_moves: list[Move] = []
        self._promotion_origin = MoveOrigin.LOCAL
        self.events = GameEvents()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def role(self) -> Faction | None:
        """Allied faction this client plays in a networked game."""
        return self._role

    @property
    def is_multiplayer(self) -> bool:
        return self._role is not None

    @property
    def waiting(self) -> bool:
        return self._waiting

    @property
    def selected_square(self) -> Square | None:
        return self._selected

    @property
    def selected_moves(self) -> list[Move]:
        return list(self._selected_moves)

    @property
    def current_player(self) -> IPlayer | None:
        return self._players.get(self._state.current_faction)

    def player(self, faction: Faction) -> IPlayer | None:
        return self._players.get(faction)

    # ── Session lifecycle ────────────────────────────────────────────────

    def new_game(
        self,
        players: Mapping[Faction, IPlayer],
        layout: str | None = None,
    ) -> None:
        self._players = dict(players)
        self._state = GameState()
        self._state.setup(layout)
        self.clear_selection()
        _LOGGER.info("New game on layout %r", self._state.layout)

        self._emit_phase(GamePhase.AWAITING_MOVE)
        self._emit_turn_changed()
        self._prompt_current_player()

    def restart(self, layout: str | None = None) -> None:
        """Start over with the same players (and layout unless given)."""
        self.new_game(self._players, layout or self._state.layout)

    def set_role(self, role: Faction | None) -> None:
        if role is not None and not role.is_allied:
            raise ValueError(f"Network role must be an allied faction, got {role}")
        self._role = role
        self.clear_selection()

    def set_waiting(self, waiting: bool) -> None:
        self._waiting = waiting
        if waiting:
            self.clear_selection()

    # ── Selection ────────────────────────────────────────────────────────

    def can_select_piece(self, sq: Square) -> bool:
        """Whether the local user may pick up the piece on *sq* right now."""
        state = self._state
        if self._waiting or state.phase != GamePhase.AWAITING_MOVE:
            return False
        if not self._is_square(sq):
            return False
        piece = state.board[sq]
        if piece is None:
            return False

        mover = state.current_faction
        if mover == Faction.ENEMY:
            return False
        if self._role is not None and (mover != self._role or piece.faction != self._role):
            return False
        return Rules.may_control(state.board, mover, piece.faction)

    def select_square(self, sq: Square) -> list[Move]:
        """Select the piece on *sq* and return its legal moves.

        Anything the local user may not pick up clears the selection.
        """
        if not self.can_select_piece(sq):
            self.clear_selection()
            return []
        self._selected = sq
        self._selected_moves = self._state.legal_moves(sq)
        return list(self._selected_moves)

    def clear_selection(self) -> None:
        self._selected = None
        self._selected_moves = []

    # ── IGameController impl ─────────────────────────────────────────────

    def submit_move(
        self,
        from_sq: Square,
        to_sq: Square,
        origin: MoveOrigin = MoveOrigin.LOCAL,
    ) -> bool:
        move = self._find_legal_move(from_sq, to_sq, origin)
        if move is None:
            _LOGGER.debug("Rejected %s move %r -> %r", origin.name, from_sq, to_sq)
            if origin == MoveOrigin.LOCAL:
                self.clear_selection()
            return False
        return self._apply(move, origin)

    def complete_promotion(self, piece_type: PieceType) -> bool:
        state = self._state
        sq = state.pending_promotion
        if sq is None:
            return False
        if not state.complete_promotion(piece_type):
            return False

        record = state.last_move
        assert record is not None
        _LOGGER.info("Promotion on %s to %s", sq, piece_type.name)
        self._after_move(record, self._promotion_origin)
        return True

    def apply_remote_move(
        self,
        from_sq: Square,
        to_sq: Square,
        promotion: PieceType | None = None,
    ) -> bool:
        move = self._find_legal_move(from_sq, to_sq, MoveOrigin.REMOTE)
        if move is not None and self._promotes_allied_pawn(move):
            if promotion not in PROMOTION_TYPES:
                move = None
        if move is None:
            _LOGGER.error("Remote move %r -> %r is illegal here", from_sq, to_sq)
            for cb in self.events.on_desync:
                cb(from_sq, to_sq)
            return False
        return self._apply(move, MoveOrigin.REMOTE, promotion)

    def pass_turn(self) -> None:
        """Skip the current mover (it has no legal move) and continue."""
        state = self._state
        if state.is_game_over or state.is_promotion_pending:
            return
        _LOGGER.info("%s has no legal move; passing", state.current_faction)
        state.pass_turn()
        self._emit_turn_changed()
        self._prompt_current_player()

    # ── Internal helpers ─────────────────────────────────────────────────

    @staticmethod
    def _is_square(sq: object) -> bool:
        return isinstance(sq, int) and not isinstance(sq, bool) and is_valid_square(sq)

    def _find_legal_move(
        self,
        from_sq: Square,
        to_sq: Square,
        origin: MoveOrigin,
    ) -> Move | None:
        state = self._state
        expected = {
            MoveOrigin.LOCAL: GamePhase.AWAITING_MOVE,
            MoveOrigin.ENGINE: GamePhase.THINKING,
            MoveOrigin.REMOTE: GamePhase.AWAITING_REMOTE,
        }[origin]
        if state.phase != expected:
            return None
        if not (self._is_square(from_sq) and self._is_square(to_sq)):
            return None

        piece = state.board[from_sq]
        if piece is None:
            return None
        mover = state.current_faction
        if origin == MoveOrigin.LOCAL:
            if not self.can_select_piece(from_sq):
                return None
        elif not Rules.may_control(state.board, mover, piece.faction):
            return None

        for move in state.legal_moves(from_sq):
            if move.to_sq == to_sq:
                return move
        return None

    def _promotes_allied_pawn(self, move: Move) -> bool:
        piece = self._state.board[move.from_sq]
        return (
            piece is not None
            and piece.faction.is_allied
            and piece.piece_type == PieceType.PAWN
            and row_of(move.to_sq) == promotion_row(piece.faction)
        )

    def _apply(
        self,
        move: Move,
        origin: MoveOrigin,
        promotion: PieceType | None = None,
    ) -> bool:
        self.clear_selection()
        state = self._state
        record = state.apply_move(move)
        _LOGGER.info("%s played %s (%s)", record.faction, record.move, origin.name)

        if state.is_promotion_pending:
            if promotion is not None:
                state.complete_promotion(promotion)
            else:
                sq = state.pending_promotion
                assert sq is not None
                self._promotion_origin = origin
                self._emit_phase(GamePhase.AWAITING_PROMOTION)
                for cb in self.events.on_promotion_required:
                    cb(sq, record.faction)
                return True

        self._after_move(record, origin)
        return True

    def _after_move(self, record: MoveRecord, origin: MoveOrigin) -> None:
        for cb in self.events.on_move:
            cb(record, origin)

        if self._state.is_game_over:
            self._emit_game_over(self._state.outcome)
            return

        self._emit_turn_changed()
        self._prompt_current_player()

    def _is_local_turn(self) -> bool:
        if self._role is None:
            return True
        state = self._state
        mover = state.current_faction
        if mover == Faction.ENEMY:
            return _ENEMY_SLOT_OWNER.get(state.turn_index) == self._role
        return mover == self._role

    def _prompt_current_player(self) -> None:
        """Ask the current player to move."""
        state = self._state
        if state.is_game_over:
            return

        if not self._is_local_turn():
            if state.current_faction == Faction.ENEMY and not MoveGenerator(
                state.board
            ).has_legal_move(Faction.ENEMY):
                # The owning client passes this slot without sending a move.
                self.pass_turn()
                return
            state.phase = GamePhase.AWAITING_REMOTE
            self._emit_phase(GamePhase.AWAITING_REMOTE)
            return

        cp = self.current_player
        if cp is None or cp.is_human:
            state.phase = GamePhase.AWAITING_MOVE
            self._emit_phase(GamePhase.AWAITING_MOVE)
            return

        state.phase = GamePhase.THINKING
        self._emit_phase(GamePhase.THINKING)
        cp.request_move(state)

    def _emit_turn_changed(self) -> None:
        faction = self._state.current_faction
        for cb in self.events.on_turn_changed:
            cb(faction)

    def _emit_game_over(self, outcome: GameOutcome) -> None:
        self._emit_phase(GamePhase.GAME_OVER)
        for cb in self.events.on_game_over:
            cb(outcome)

    def _emit_phase(self, phase: GamePhase) -> None:
        for cb in self.events.on_phase_changed:
            cb(phase)
