"""Shared pytest fixtures used across the test suite."""

from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest

from alliedchess.core.board import Board
from alliedchess.core.piece import Piece
from alliedchess.core.types import make_square


@pytest.fixture(scope="session")
def qapp() -> Iterator[object]:
    """Provide a singleton QCoreApplication for timer and signal tests."""
    from PyQt6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


@pytest.fixture
def make_board() -> Callable[[dict[tuple[int, int], str]], Board]:
    """Factory: ``make_board({(row, col): "Ak", ...})`` → Board."""

    def _make(placements: dict[tuple[int, int], str]) -> Board:
        board = Board()
        for (row, col), code in placements.items():
            board[make_square(row, col)] = Piece.from_code(code)
        return board

    return _make
