"""Move value object."""

from __future__ import annotations

from dataclasses import dataclass

from alliedchess.core.enums import CastlingSide
from alliedchess.core.types import Square, col_of, square_name


@dataclass(frozen=True, slots=True)
class Move:
    """Immutable description of a single relocation.

    A move is not a ledger entry: only the last move is kept by the game.
    """

    from_sq: Square
    to_sq: Square
    castling: CastlingSide | None = None

    # ── Display ──────────────────────────────────────────────────────────

    def __str__(self) -> str:
        return f"{square_name(self.from_sq)}{square_name(self.to_sq)}"

    @property
    def column_span(self) -> int:
        """Absolute number of columns travelled."""
        return abs(col_of(self.to_sq) - col_of(self.from_sq))
