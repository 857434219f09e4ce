"""Enemy engine package: minimax search and Qt worker bridge."""

from alliedchess.engine.minimax import MinimaxEngine
from alliedchess.engine.qt_bridge import EngineWorker
from alliedchess.engine.search import IEngine, SearchLimits, SearchResult

__all__ = [
    "EngineWorker",
    "IEngine",
    "MinimaxEngine",
    "SearchLimits",
    "SearchResult",
]
