"""Shared engine search models and protocol."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from alliedchess.core.board import Board
    from alliedchess.core.move import Move


@dataclass(slots=True, frozen=True)
class SearchLimits:
    """Search constraints for a single move computation.

    Depth 2 is one Enemy ply plus one allied reply.
    """

    max_depth: int = 2


@dataclass(slots=True, frozen=True)
class SearchResult:
    """Result produced by the engine search."""

    best_move: Move | None
    score: int
    depth: int
    nodes: int


class IEngine(Protocol):
    """Protocol for engines choosing the Enemy's move."""

    def search(self, board: Board, limits: SearchLimits) -> SearchResult: ...
