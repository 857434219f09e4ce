"""Square type alias and coordinate helpers.

Board layout (row-major, row 0 is the Enemy's far side):
    a8=0,  b8=1,  ..., h8=7      (row 0)
    a7=8,  b7=9,  ..., h7=15     (row 1)
    ...
    a1=56, b1=57, ..., h1=63     (row 7)
"""

from __future__ import annotations

from typing import TypeAlias

Square: TypeAlias = int  # 0–63

ROWS = 8
COLS = 8


def row_of(sq: Square) -> int:
    """Row index 0–7 (0 = far side)."""
    return sq >> 3


def col_of(sq: Square) -> int:
    """Column index 0–7 (a–h)."""
    return sq & 7


def make_square(row: int, col: int) -> Square:
    """Create square from row (0–7) and column (0–7)."""
    return row * COLS + col


def is_on_board(row: int, col: int) -> bool:
    """Check whether a (row, column) pair lies on the board."""
    return 0 <= row < ROWS and 0 <= col < COLS


def is_valid_square(sq: int) -> bool:
    """Check whether integer is a valid square index."""
    return 0 <= sq < ROWS * COLS


def square_name(sq: Square) -> str:
    """Human-readable name, e.g. 52 → 'e2'."""
    return chr(ord("a") + col_of(sq)) + str(ROWS - row_of(sq))


def parse_square(name: str) -> Square:
    """Parse square name, e.g. 'e4' → 36."""
    if len(name) != 2 or name[0] not in "abcdefgh" or name[1] not in "12345678":
        raise ValueError(f"Invalid square name: {name!r}")
    return make_square(ROWS - int(name[1]), ord(name[0]) - ord("a"))


# ── Named square constants ──────────────────────────────────────────────────

A8, B8, C8, D8, E8, F8, G8, H8 = range(0, 8)
A7, B7, C7, D7, E7, F7, G7, H7 = range(8, 16)
A6, B6, C6, D6, E6, F6, G6, H6 = range(16, 24)
A5, B5, C5, D5, E5, F5, G5, H5 = range(24, 32)
A4, B4, C4, D4, E4, F4, G4, H4 = range(32, 40)
A3, B3, C3, D3, E3, F3, G3, H3 = range(40, 48)
A2, B2, C2, D2, E2, F2, G2, H2 = range(48, 56)
A1, B1, C1, D1, E1, F1, G1, H1 = range(56, 64)
