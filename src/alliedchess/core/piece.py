"""Piece object."""

from __future__ import annotations

from dataclasses import dataclass

from alliedchess.core.enums import Faction, PieceType


@dataclass(slots=True)
class Piece:
    """A chess piece owned by exactly one board cell.

    ``has_moved`` is set on every move of the piece and never reset; it gates
    castling.
    """

    piece_type: PieceType
    faction: Faction
    has_moved: bool = False

    # ── Serialisation ────────────────────────────────────────────────────

    def __str__(self) -> str:
        """Single character: uppercase for the allies, lowercase for the Enemy."""
        char = self.piece_type.char
        if self.faction == Faction.ENEMY:
            return char
        return char.upper()

    @classmethod
    def from_code(cls, code: str) -> Piece:
        """Create piece from a two-character code, e.g. ``'Aq'`` or ``'Ep'``."""
        if len(code) != 2:
            raise ValueError(f"Invalid piece code: {code!r}")
        factions = {"A": Faction.A, "B": Faction.B, "E": Faction.ENEMY}
        try:
            faction = factions[code[0]]
        except KeyError:
            raise ValueError(f"Invalid piece code: {code!r}") from None
        return cls(PieceType.from_char(code[1]), faction)

    @property
    def code(self) -> str:
        """Two-character code, faction letter then type, e.g. 'Bn'."""
        prefix = "E" if self.faction == Faction.ENEMY else self.faction.name
        return prefix + self.piece_type.char
