"""Legal and pseudo-legal move generation + attack detection."""

from __future__ import annotations

from collections.abc import Iterable

from alliedchess.core.board import Board
from alliedchess.core.enums import CastlingSide, Faction, PieceType, hostile
from alliedchess.core.move import Move
from alliedchess.core.piece import Piece
from alliedchess.core.types import COLS, ROWS, Square, col_of, make_square, row_of

KNIGHT_OFFSETS: tuple[tuple[int, int], ...] = (
    (2, 1),
    (2, -1),
    (-2, 1),
    (-2, -1),
    (1, 2),
    (1, -2),
    (-1, 2),
    (-1, -2),
)

KING_OFFSETS: tuple[tuple[int, int], ...] = (
    (0, 1),
    (0, -1),
    (1, 0),
    (-1, 0),
    (1, 1),
    (1, -1),
    (-1, 1),
    (-1, -1),
)

ROOK_DIRS: tuple[tuple[int, int], ...] = ((0, 1), (0, -1), (1, 0), (-1, 0))
BISHOP_DIRS: tuple[tuple[int, int], ...] = ((1, 1), (1, -1), (-1, 1), (-1, -1))
QUEEN_DIRS: tuple[tuple[int, int], ...] = ROOK_DIRS + BISHOP_DIRS

# Factions whose pieces threaten a given faction.
_ATTACKERS: dict[Faction, tuple[Faction, ...]] = {
    Faction.A: (Faction.ENEMY,),
    Faction.B: (Faction.ENEMY,),
    Faction.ENEMY: (Faction.A, Faction.B),
}


def pawn_direction(faction: Faction) -> int:
    """Row step of a pawn: the Enemy advances down the board, allies up."""
    return 1 if faction == Faction.ENEMY else -1


def pawn_home_row(faction: Faction) -> int:
    return 1 if faction == Faction.ENEMY else ROWS - 2


def promotion_row(faction: Faction) -> int:
    return ROWS - 1 if faction == Faction.ENEMY else 0


# -- Precomputed lookup tables ---------------------------------------------


def _build_targets(
    offsets: tuple[tuple[int, int], ...],
) -> tuple[tuple[Square, ...], ...]:
    targets: list[tuple[Square, ...]] = []
    for sq in range(ROWS * COLS):
        row_idx = row_of(sq)
        col_idx = col_of(sq)
        moves: list[Square] = []
        for dr, dc in offsets:
            ar = row_idx + dr
            ac = col_idx + dc
            if 0 <= ar < ROWS and 0 <= ac < COLS:
                moves.append(make_square(ar, ac))
        targets.append(tuple(moves))
    return tuple(targets)


def _build_attack_masks(targets: tuple[tuple[Square, ...], ...]) -> tuple[int, ...]:
    masks: list[int] = [0] * len(targets)
    for sq, squares in enumerate(targets):
        mask = 0
        for to_sq in squares:
            mask |= 1 << to_sq
        masks[sq] = mask
    return tuple(masks)


def _build_pawn_attacker_masks(direction: int) -> tuple[int, ...]:
    """For each square, the squares a pawn moving *direction* attacks it from."""
    masks: list[int] = [0] * (ROWS * COLS)
    for sq in range(ROWS * COLS):
        from_row = row_of(sq) - direction
        if not 0 <= from_row < ROWS:
            continue
        mask = 0
        for dc in (-1, 1):
            from_col = col_of(sq) + dc
            if 0 <= from_col < COLS:
                mask |= 1 << make_square(from_row, from_col)
        masks[sq] = mask
    return tuple(masks)


def _build_rays(
    directions: tuple[tuple[int, int], ...],
) -> tuple[tuple[tuple[Square, ...], ...], ...]:
    rays_per_square: list[tuple[tuple[Square, ...], ...]] = []
    for sq in range(ROWS * COLS):
        square_rays: list[tuple[Square, ...]] = []
        for dr, dc in directions:
            ar = row_of(sq) + dr
            ac = col_of(sq) + dc
            ray: list[Square] = []
            while 0 <= ar < ROWS and 0 <= ac < COLS:
                ray.append(make_square(ar, ac))
                ar += dr
                ac += dc
            square_rays.append(tuple(ray))
        rays_per_square.append(tuple(square_rays))
    return tuple(rays_per_square)


_KNIGHT_TARGETS = _build_targets(KNIGHT_OFFSETS)
_KING_TARGETS = _build_targets(KING_OFFSETS)
_KNIGHT_ATTACK_MASKS = _build_attack_masks(_KNIGHT_TARGETS)
_KING_ATTACK_MASKS = _build_attack_masks(_KING_TARGETS)
_PAWN_ATTACKER_MASKS: dict[Faction, tuple[int, ...]] = {
    Faction.A: _build_pawn_attacker_masks(pawn_direction(Faction.A)),
    Faction.B: _build_pawn_attacker_masks(pawn_direction(Faction.B)),
    Faction.ENEMY: _build_pawn_attacker_masks(pawn_direction(Faction.ENEMY)),
}

_ROOK_RAYS = _build_rays(ROOK_DIRS)
_BISHOP_RAYS = _build_rays(BISHOP_DIRS)
_QUEEN_RAYS = _build_rays(QUEEN_DIRS)

_SLIDER_RAYS: dict[PieceType, tuple[tuple[tuple[Square, ...], ...], ...]] = {
    PieceType.ROOK: _ROOK_RAYS,
    PieceType.BISHOP: _BISHOP_RAYS,
    PieceType.QUEEN: _QUEEN_RAYS,
}


class MoveGenerator:
    """Generates moves for individual pieces on a :class:`Board`.

    There are two generator entry points. :meth:`generate_moves`
    is castling-aware and only used for the actual mover, while
    :meth:`threat_moves` never considers castling and backs every attack query.
    Legality filtering mutates the board through :meth:`Board.simulate` and
    always restores it before returning.
    """

    __slots__ = ("_board",)

    def __init__(self, board: Board) -> None:
        self._board = board

    @property
    def board(self) -> Board:
        return self._board

    # -- Public API ---------------------------------------------------------

    def legal_moves(self, sq: Square) -> list[Move]:
        """Strictly legal moves for the piece on *sq* (empty if none)."""
        piece = self._board[sq]
        if piece is None:
            return []
        faction = piece.faction
        return [
            move
            for move in self.generate_moves(sq)
            if not self.leaves_team_in_check(move, faction)
        ]

    def all_legal_moves(self, factions: Iterable[Faction]) -> list[Move]:
        """Legal moves for every piece of *factions*, in board order."""
        occupancy = 0
        for faction in factions:
            occupancy |= self._board.all_pieces_bitboard(faction)

        moves: list[Move] = []
        while occupancy:
            lsb = occupancy & -occupancy
            moves.extend(self.legal_moves(lsb.bit_length() - 1))
            occupancy ^= lsb
        return moves

    def has_legal_move(self, faction: Faction) -> bool:
        """Whether any piece of *faction* has at least one legal move."""
        for sq in self._board.all_pieces(faction):
            if self.legal_moves(sq):
                return True
        return False

    def generate_moves(self, sq: Square) -> list[Move]:
        """Castling-aware pseudo-legal moves (may leave a king in check)."""
        piece = self._board[sq]
        if piece is None:
            return []
        moves = self.threat_moves(sq)
        if piece.piece_type == PieceType.KING and not piece.has_moved:
            self._gen_castling(sq, piece, moves)
        return moves

    def threat_moves(self, sq: Square) -> list[Move]:
        """Pseudo-legal moves without castling, as used by attack queries."""
        piece = self._board[sq]
        if piece is None:
            return []

        moves: list[Move] = []
        piece_type = piece.piece_type
        if piece_type == PieceType.PAWN:
            self._gen_pawn(sq, piece.faction, moves)
        elif piece_type == PieceType.KNIGHT:
            self._gen_step(sq, piece.faction, _KNIGHT_TARGETS[sq], moves)
        elif piece_type == PieceType.KING:
            self._gen_step(sq, piece.faction, _KING_TARGETS[sq], moves)
        else:
            self._gen_sliding(sq, piece.faction, _SLIDER_RAYS[piece_type][sq], moves)
        return moves

    def leaves_team_in_check(self, move: Move, faction: Faction) -> bool:
        """Would *move* leave *faction*'s or its ally's king attacked?"""
        with self._board.simulate(move):
            if self.is_king_in_check(faction):
                return True
            ally = faction.ally
            return ally is not None and self.is_king_in_check(ally)

    # -- Attack detection (public) -----------------------------------------

    def is_king_in_check(self, faction: Faction) -> bool:
        """Is any king of *faction* attacked by a hostile piece?"""
        for king_sq in self._board.kings(faction):
            if self.is_square_attacked(king_sq, faction):
                return True
        return False

    def is_square_attacked(self, sq: Square, faction: Faction) -> bool:
        """Is *sq* attacked by any piece hostile to *faction*?"""
        for attacker in _ATTACKERS[faction]:
            if self._attacked_by(sq, attacker):
                return True
        return False

    def _attacked_by(self, sq: Square, attacker: Faction) -> bool:
        board = self._board

        # Pawns and kings: geometric short circuit.
        if board.pieces_bitboard(attacker, PieceType.PAWN) & _PAWN_ATTACKER_MASKS[
            attacker
        ][sq]:
            return True
        if board.pieces_bitboard(attacker, PieceType.KING) & _KING_ATTACK_MASKS[sq]:
            return True

        # Other pieces cannot land on a square held by their own side.
        occupant = board[sq]
        if occupant is not None and not hostile(occupant.faction, attacker):
            return False

        if board.pieces_bitboard(attacker, PieceType.KNIGHT) & _KNIGHT_ATTACK_MASKS[sq]:
            return True

        queens = board.has_piece(attacker, PieceType.QUEEN)
        if queens or board.has_piece(attacker, PieceType.BISHOP):
            if self._ray_hits(sq, attacker, _BISHOP_RAYS[sq], PieceType.BISHOP):
                return True
        if queens or board.has_piece(attacker, PieceType.ROOK):
            if self._ray_hits(sq, attacker, _ROOK_RAYS[sq], PieceType.ROOK):
                return True
        return False

    def _ray_hits(
        self,
        sq: Square,
        attacker: Faction,
        rays: tuple[tuple[Square, ...], ...],
        slider: PieceType,
    ) -> bool:
        board = self._board
        for ray in rays:
            for to_sq in ray:
                piece = board[to_sq]
                if piece is None:
                    continue
                if piece.faction == attacker and piece.piece_type in (
                    slider,
                    PieceType.QUEEN,
                ):
                    return True
                break
        return False

    # -- Piece-specific generators (private) -------------------------------

    def _gen_pawn(self, sq: Square, faction: Faction, moves: list[Move]) -> None:
        board = self._board
        direction = pawn_direction(faction)
        row_idx = row_of(sq)
        col_idx = col_of(sq)
        next_row = row_idx + direction
        if not 0 <= next_row < ROWS:
            return

        one_step = make_square(next_row, col_idx)
        if board.is_empty(one_step):
            moves.append(Move(sq, one_step))
            if row_idx == pawn_home_row(faction):
                two_step = make_square(row_idx + 2 * direction, col_idx)
                if board.is_empty(two_step):
                    moves.append(Move(sq, two_step))

        for dc in (1, -1):
            cap_col = col_idx + dc
            if not 0 <= cap_col < COLS:
                continue
            cap_sq = make_square(next_row, cap_col)
            target = board[cap_sq]
            if target is not None and hostile(faction, target.faction):
                moves.append(Move(sq, cap_sq))

    def _gen_step(
        self,
        sq: Square,
        faction: Faction,
        targets: tuple[Square, ...],
        moves: list[Move],
    ) -> None:
        board = self._board
        for to_sq in targets:
            target = board[to_sq]
            if target is None or hostile(faction, target.faction):
                moves.append(Move(sq, to_sq))

    def _gen_sliding(
        self,
        sq: Square,
        faction: Faction,
        rays: tuple[tuple[Square, ...], ...],
        moves: list[Move],
    ) -> None:
        board = self._board
        for ray in rays:
            for to_sq in ray:
                target = board[to_sq]
                if target is None:
                    moves.append(Move(sq, to_sq))
                    continue
                if hostile(faction, target.faction):
                    moves.append(Move(sq, to_sq))
                break

    def _gen_castling(self, king_sq: Square, king: Piece, moves: list[Move]) -> None:
        if self.is_square_attacked(king_sq, king.faction):
            return

        col_idx = col_of(king_sq)
        if col_idx + 3 < COLS:
            self._try_castle(king_sq, king, COLS - 1, CastlingSide.KINGSIDE, moves)
        if col_idx - 4 >= 0:
            self._try_castle(king_sq, king, 0, CastlingSide.QUEENSIDE, moves)

    def _try_castle(
        self,
        king_sq: Square,
        king: Piece,
        rook_col: int,
        side: CastlingSide,
        moves: list[Move],
    ) -> None:
        board = self._board
        row_idx = row_of(king_sq)
        king_col = col_of(king_sq)

        rook = board[make_square(row_idx, rook_col)]
        if (
            rook is None
            or rook.piece_type != PieceType.ROOK
            or rook.faction != king.faction
            or rook.has_moved
        ):
            return

        low, high = sorted((king_col, rook_col))
        for col in range(low + 1, high):
            if not board.is_empty(make_square(row_idx, col)):
                return

        step = 1 if rook_col > king_col else -1
        for distance in (1, 2):
            transit = make_square(row_idx, king_col + step * distance)
            if self.is_square_attacked(transit, king.faction):
                return

        moves.append(Move(king_sq, make_square(row_idx, king_col + 2 * step), side))
