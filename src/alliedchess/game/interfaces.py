"""Abstract interfaces for the game layer.

Follows Dependency Inversion: the high-level GameController depends on
these ABCs, not on concrete player implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from enum import IntEnum, auto
from typing import TYPE_CHECKING

from alliedchess.core.enums import Faction, PieceType

if TYPE_CHECKING:
    from alliedchess.core.types import Square
    from alliedchess.game.state import GameState


# ── Game phase FSM states ────────────────────────────────────────────────────


class GamePhase(IntEnum):
    """Finite-state-machine states for a game session."""

    NOT_STARTED = auto()
    AWAITING_MOVE = auto()
    AWAITING_PROMOTION = auto()
    AWAITING_REMOTE = auto()  # the peer (or its engine) is on move
    THINKING = auto()  # Enemy engine is computing
    GAME_OVER = auto()


class MoveOrigin(IntEnum):
    """Where a move request came from."""

    LOCAL = auto()
    ENGINE = auto()
    REMOTE = auto()


# ── Abstract interfaces ─────────────────────────────────────────────────────


class IPlayer(ABC):
    """Interface for a participant (human or engine)."""

    @property
    @abstractmethod
    def faction(self) -> Faction: ...

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def is_human(self) -> bool: ...

    @abstractmethod
    def request_move(self, state: GameState) -> None:
        """Begin the move-selection process.

        For humans this is a no-op (they interact via an input adapter).
        For the engine this schedules a search.
        """


class IGameController(ABC):
    """Interface for the game orchestrator."""

    @abstractmethod
    def new_game(
        self,
        players: Mapping[Faction, IPlayer],
        layout: str | None = None,
    ) -> None:
        """Set up a new session, replacing the current one wholesale."""

    @abstractmethod
    def submit_move(
        self,
        from_sq: Square,
        to_sq: Square,
        origin: MoveOrigin = MoveOrigin.LOCAL,
    ) -> bool:
        """Submit a move. Returns True if legal and applied."""

    @abstractmethod
    def complete_promotion(self, piece_type: PieceType) -> bool:
        """Resolve a pending promotion. Returns True if accepted."""

    @abstractmethod
    def apply_remote_move(
        self,
        from_sq: Square,
        to_sq: Square,
        promotion: PieceType | None = None,
    ) -> bool:
        """Apply a move delivered by the network peer after re-validation."""
