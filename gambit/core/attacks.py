"""Attack and check oracle.

A square is attacked by a colour when one of that colour's pieces could
capture on it under ordinary movement rules. Castling never attacks and
pins are ignored, so the oracle never recurses into legality checking.
The scan runs outward from the target square, which visits the same piece
patterns as enumerating every attacker's destinations.
"""

from typing import Optional, Sequence, Tuple

from .board import PAWN_DIRECTION, find_king, piece_at
from .pieces import Color, Piece, PieceKind

ORTHOGONAL = ((0, 1), (0, -1), (1, 0), (-1, 0))
DIAGONAL = ((1, 1), (1, -1), (-1, 1), (-1, -1))
KNIGHT_OFFSETS = (
    (-2, -1), (-2, 1), (-1, -2), (-1, 2),
    (1, -2), (1, 2), (2, -1), (2, 1),
)
KING_OFFSETS = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1), (0, 1),
    (1, -1), (1, 0), (1, 1),
)

_ORTHOGONAL_SLIDERS = (PieceKind.ROOK, PieceKind.QUEEN)
_DIAGONAL_SLIDERS = (PieceKind.BISHOP, PieceKind.QUEEN)

GridLike = Sequence[Sequence[Optional[Piece]]]


def _is(piece: Optional[Piece], color: Color, kinds) -> bool:
    return piece is not None and piece.color is color and piece.kind in kinds


def square_attacked_on(board: GridLike, square: Tuple[int, int], by_color: Color) -> bool:
    """Board-level attack test; works on live and scratch boards alike."""
    row, col = square

    # A pawn attacks diagonally forward, so look one row "behind" the square.
    pawn_row = row - PAWN_DIRECTION[by_color]
    for d_col in (-1, 1):
        if _is(piece_at(board, (pawn_row, col + d_col)), by_color, (PieceKind.PAWN,)):
            return True

    for d_row, d_col in KNIGHT_OFFSETS:
        if _is(piece_at(board, (row + d_row, col + d_col)), by_color, (PieceKind.KNIGHT,)):
            return True

    for d_row, d_col in KING_OFFSETS:
        if _is(piece_at(board, (row + d_row, col + d_col)), by_color, (PieceKind.KING,)):
            return True

    for directions, sliders in ((ORTHOGONAL, _ORTHOGONAL_SLIDERS), (DIAGONAL, _DIAGONAL_SLIDERS)):
        for d_row, d_col in directions:
            r, c = row + d_row, col + d_col
            while 0 <= r < 8 and 0 <= c < 8:
                piece = board[r][c]
                if piece is not None:
                    if piece.color is by_color and piece.kind in sliders:
                        return True
                    break
                r += d_row
                c += d_col

    return False


def king_in_check_on(board: GridLike, color: Color) -> bool:
    king = find_king(board, color)
    if king is None:
        # Malformed position; treated as "not in check".
        return False
    return square_attacked_on(board, king, color.opponent)


def is_square_attacked(state, square: Tuple[int, int], by_color: Color) -> bool:
    return square_attacked_on(state.board, square, by_color)


def is_in_check(state, color: Color) -> bool:
    """True when ``color``'s king is attacked. A board without that king is never in check."""
    return king_in_check_on(state.board, color)
