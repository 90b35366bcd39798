"""Static material evaluation."""

from .board import iter_pieces
from .pieces import CapturedPieces, Color, PieceKind

# Pawn units. The king is never traded, so it carries no material value.
PIECE_VALUES = {
    PieceKind.PAWN: 1,
    PieceKind.KNIGHT: 3,
    PieceKind.BISHOP: 3,
    PieceKind.ROOK: 5,
    PieceKind.QUEEN: 9,
    PieceKind.KING: 0,
}


def evaluate(board, for_color: Color) -> int:
    """Material of ``for_color`` minus material of its opponent."""
    score = 0
    for _, piece in iter_pieces(board):
        value = PIECE_VALUES[piece.kind]
        score += value if piece.color is for_color else -value
    return score


def material_advantage(captured: CapturedPieces) -> int:
    """Captured-material balance, positive when white has taken more."""
    taken_by_white = sum(PIECE_VALUES[p.kind] for p in captured.black)
    taken_by_black = sum(PIECE_VALUES[p.kind] for p in captured.white)
    return taken_by_white - taken_by_black
