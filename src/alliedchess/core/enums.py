"""Core enumerations for the allied chess domain."""

from __future__ import annotations

from enum import Enum, IntEnum


class Faction(IntEnum):
    """Game-theoretic side. A and B are permanently allied."""

    A = 0
    B = 1
    ENEMY = 2

    @property
    def ally(self) -> Faction | None:
        """The allied faction, or ``None`` for the Enemy."""
        if self == Faction.A:
            return Faction.B
        if self == Faction.B:
            return Faction.A
        return None

    @property
    def is_allied(self) -> bool:
        return self != Faction.ENEMY

    def is_hostile_to(self, other: Faction) -> bool:
        return hostile(self, other)

    def __str__(self) -> str:
        return "Enemy" if self == Faction.ENEMY else self.name


ALLIED_FACTIONS: tuple[Faction, Faction] = (Faction.A, Faction.B)


def hostile(first: Faction, second: Faction) -> bool:
    """Symmetric hostility: exactly the pairs that involve the Enemy."""
    return first != second and (first == Faction.ENEMY or second == Faction.ENEMY)


class PieceType(IntEnum):
    """Chess piece types ordered by conventional value."""

    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6

    @property
    def char(self) -> str:
        return _TYPE_CHARS[self]

    @classmethod
    def from_char(cls, char: str) -> PieceType:
        """Parse a one-letter type code, e.g. ``'q'`` → QUEEN."""
        try:
            return _CHAR_TYPES[char.lower()]
        except KeyError:
            raise ValueError(f"Invalid piece type: {char!r}") from None


_TYPE_CHARS: dict[PieceType, str] = {
    PieceType.PAWN: "p",
    PieceType.KNIGHT: "n",
    PieceType.BISHOP: "b",
    PieceType.ROOK: "r",
    PieceType.QUEEN: "q",
    PieceType.KING: "k",
}
_CHAR_TYPES: dict[str, PieceType] = {v: k for k, v in _TYPE_CHARS.items()}

PROMOTION_TYPES: tuple[PieceType, ...] = (
    PieceType.QUEEN,
    PieceType.ROOK,
    PieceType.BISHOP,
    PieceType.KNIGHT,
)


class CastlingSide(str, Enum):
    """Castling direction relative to the king."""

    KINGSIDE = "kingside"
    QUEENSIDE = "queenside"


class GameOutcome(IntEnum):
    """Outcome of a game from the allies' point of view."""

    IN_PROGRESS = 0
    VICTORY = 1
    DEFEAT = 2
