"""Concrete player implementations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from alliedchess.core.enums import Faction
from alliedchess.game.interfaces import IPlayer

if TYPE_CHECKING:
    from alliedchess.game.state import GameState


class HumanPlayer(IPlayer):
    """A human participant. Moves come from an input adapter.

    ``request_move`` is a no-op because humans select moves interactively.
    """

    __slots__ = ("_faction", "_name")

    def __init__(self, faction: Faction, name: str = "") -> None:
        self._faction = faction
        self._name = name or f"Player {faction}"

    @property
    def faction(self) -> Faction:
        return self._faction

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_human(self) -> bool:
        return True

    def request_move(self, state: GameState) -> None:
        pass  # Human moves arrive via controller.submit_move()


class AIPlayer(IPlayer):
    """An engine participant that delegates computation to a callback.

    In production the callable is :meth:`EngineSession.request_move`, which
    defers the blocking search to the next event-loop tick.

    Args:
        faction: Side the engine plays.
        name: Display name.
        on_request_move: ``(GameState) -> None``, called when the game
            controller asks the engine to start thinking.
    """

    __slots__ = ("_faction", "_name", "_on_request_move")

    def __init__(
        self,
        faction: Faction = Faction.ENEMY,
        name: str = "Enemy",
        on_request_move: Callable[[GameState], None] | None = None,
    ) -> None:
        self._faction = faction
        self._name = name
        self._on_request_move = on_request_move

    @property
    def faction(self) -> Faction:
        return self._faction

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_human(self) -> bool:
        return False

    def request_move(self, state: GameState) -> None:
        if self._on_request_move is not None:
            self._on_request_move(state)
