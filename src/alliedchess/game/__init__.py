"""Game layer: session state, orchestration, players."""

from alliedchess.game.controller import GameController, GameEvents
from alliedchess.game.engine_session import EngineSession
from alliedchess.game.interfaces import GamePhase, IGameController, IPlayer, MoveOrigin
from alliedchess.game.player import AIPlayer, HumanPlayer
from alliedchess.game.state import GameState, MoveRecord

__all__ = [
    "AIPlayer",
    "EngineSession",
    "GameController",
    "GameEvents",
    "GamePhase",
    "GameState",
    "HumanPlayer",
    "IGameController",
    "IPlayer",
    "MoveOrigin",
    "MoveRecord",
]
