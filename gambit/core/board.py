"""Board model: an 8x8 grid of optional pieces.

The live board is a tuple of eight row tuples. Scratch boards used while
testing a candidate move are plain lists of lists; every helper here
accepts either.
"""

from typing import Iterator, List, Optional, Sequence, Tuple

from .pieces import Color, Piece, PieceKind, Position

Board = Tuple[Tuple[Optional[Piece], ...], ...]
MutableBoard = List[List[Optional[Piece]]]

BOARD_SIZE = 8

BACK_RANK = (
    PieceKind.ROOK, PieceKind.KNIGHT, PieceKind.BISHOP, PieceKind.QUEEN,
    PieceKind.KING, PieceKind.BISHOP, PieceKind.KNIGHT, PieceKind.ROOK,
)

HOME_ROW = {Color.WHITE: 7, Color.BLACK: 0}
PAWN_START_ROW = {Color.WHITE: 6, Color.BLACK: 1}
PROMOTION_ROW = {Color.WHITE: 0, Color.BLACK: 7}
# Row delta of a forward pawn step.
PAWN_DIRECTION = {Color.WHITE: -1, Color.BLACK: 1}

KING_COL = 4
KING_SIDE_ROOK_COL = 7
QUEEN_SIDE_ROOK_COL = 0


def initial_board() -> Board:
    rows: MutableBoard = [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]
    for col, kind in enumerate(BACK_RANK):
        rows[HOME_ROW[Color.BLACK]][col] = Piece(kind, Color.BLACK)
        rows[HOME_ROW[Color.WHITE]][col] = Piece(kind, Color.WHITE)
        rows[PAWN_START_ROW[Color.BLACK]][col] = Piece(PieceKind.PAWN, Color.BLACK)
        rows[PAWN_START_ROW[Color.WHITE]][col] = Piece(PieceKind.PAWN, Color.WHITE)
    return freeze(rows)


def empty_board() -> Board:
    return tuple((None,) * BOARD_SIZE for _ in range(BOARD_SIZE))


def is_valid_position(pos: Tuple[int, int]) -> bool:
    row, col = pos
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


def piece_at(board: Sequence[Sequence[Optional[Piece]]], pos: Tuple[int, int]) -> Optional[Piece]:
    """Piece on ``pos``, or None when the square is empty or off the board."""
    row, col = pos
    if not (0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE):
        return None
    return board[row][col]


def iter_pieces(
    board: Sequence[Sequence[Optional[Piece]]], color: Optional[Color] = None
) -> Iterator[Tuple[Position, Piece]]:
    """Yield (position, piece) in row-major order, optionally for one colour."""
    for row in range(BOARD_SIZE):
        for col in range(BOARD_SIZE):
            piece = board[row][col]
            if piece is not None and (color is None or piece.color is color):
                yield Position(row, col), piece


def find_king(board: Sequence[Sequence[Optional[Piece]]], color: Color) -> Optional[Position]:
    for pos, piece in iter_pieces(board, color):
        if piece.kind is PieceKind.KING:
            return pos
    return None


def thaw(board: Sequence[Sequence[Optional[Piece]]]) -> MutableBoard:
    """Scratch copy that can be edited without touching ``board``."""
    return [list(row) for row in board]


def freeze(board: Sequence[Sequence[Optional[Piece]]]) -> Board:
    return tuple(tuple(row) for row in board)


def render(board: Sequence[Sequence[Optional[Piece]]]) -> str:
    """ASCII diagram, rank 8 first, '.' for empty squares."""
    lines = []
    for row in board:
        lines.append(" ".join(piece.symbol() if piece else "." for piece in row))
    return "\n".join(lines)
