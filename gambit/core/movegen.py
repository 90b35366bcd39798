"""Move generation.

Pseudo-legal destinations follow each piece's movement pattern and
occupancy rules. Legal destinations additionally keep the mover's king out
of check, which is decided by playing the move on a scratch copy of the
board and asking the attack oracle, never by reasoning about pins.

Every function takes a position object exposing ``board``,
``side_to_move``, ``en_passant_target`` and ``castling_rights``; both
``GameState`` and the search's scratch position qualify.
"""

from typing import Iterator, List, Optional, Set

from .attacks import (
    DIAGONAL,
    KING_OFFSETS,
    KNIGHT_OFFSETS,
    ORTHOGONAL,
    king_in_check_on,
    square_attacked_on,
)
from .board import (
    HOME_ROW,
    KING_COL,
    KING_SIDE_ROOK_COL,
    PAWN_DIRECTION,
    PAWN_START_ROW,
    PROMOTION_ROW,
    QUEEN_SIDE_ROOK_COL,
    is_valid_position,
    iter_pieces,
    piece_at,
    thaw,
)
from .pieces import Color, Move, Piece, PieceKind, Position

SLIDING_DIRECTIONS = {
    PieceKind.ROOK: ORTHOGONAL,
    PieceKind.BISHOP: DIAGONAL,
    PieceKind.QUEEN: ORTHOGONAL + DIAGONAL,
}


# ─── pseudo-legal enumeration ──────────────────────────────────────────────

def _sliding(board, from_pos: Position, piece: Piece, directions) -> Iterator[Position]:
    for d_row, d_col in directions:
        to = from_pos.offset(d_row, d_col)
        while is_valid_position(to):
            target = board[to.row][to.col]
            if target is None:
                yield to
            else:
                if target.color is not piece.color:
                    yield to
                break
            to = to.offset(d_row, d_col)


def _stepping(board, from_pos: Position, piece: Piece, offsets) -> Iterator[Position]:
    for d_row, d_col in offsets:
        to = from_pos.offset(d_row, d_col)
        if not is_valid_position(to):
            continue
        target = board[to.row][to.col]
        if target is None or target.color is not piece.color:
            yield to


def _pawn(state, from_pos: Position, piece: Piece) -> Iterator[Position]:
    board = state.board
    direction = PAWN_DIRECTION[piece.color]

    one = from_pos.offset(direction, 0)
    if is_valid_position(one) and piece_at(board, one) is None:
        yield one
        two = from_pos.offset(2 * direction, 0)
        if from_pos.row == PAWN_START_ROW[piece.color] and piece_at(board, two) is None:
            yield two

    for d_col in (-1, 1):
        diagonal = from_pos.offset(direction, d_col)
        if not is_valid_position(diagonal):
            continue
        target = piece_at(board, diagonal)
        if target is not None:
            if target.color is not piece.color:
                yield diagonal
        elif diagonal == state.en_passant_target and _en_passant_victim(board, from_pos, diagonal, piece):
            yield diagonal


def _en_passant_victim(board, from_pos: Position, to: Position, piece: Piece) -> Optional[Piece]:
    """The pawn an en-passant capture onto ``to`` would remove, if any."""
    victim = piece_at(board, (from_pos.row, to.col))
    if victim is not None and victim.kind is PieceKind.PAWN and victim.color is not piece.color:
        return victim
    return None


def _castling(state, from_pos: Position, piece: Piece) -> Iterator[Position]:
    board = state.board
    color = piece.color
    home = HOME_ROW[color]
    if piece.has_moved or from_pos != (home, KING_COL):
        return

    rights = state.castling_rights
    enemy = color.opponent
    for allowed, rook_col, step in (
        (rights.king_side(color), KING_SIDE_ROOK_COL, 1),
        (rights.queen_side(color), QUEEN_SIDE_ROOK_COL, -1),
    ):
        if not allowed:
            continue
        rook = board[home][rook_col]
        if rook is None or rook.kind is not PieceKind.ROOK or rook.color is not color or rook.has_moved:
            continue
        low, high = sorted((KING_COL, rook_col))
        if any(board[home][col] is not None for col in range(low + 1, high)):
            continue
        target_col = KING_COL + 2 * step
        # Start, transit and landing squares must all be safe.
        if any(square_attacked_on(board, (home, col), enemy)
               for col in range(KING_COL, target_col + step, step)):
            continue
        yield Position(home, target_col)


def _destinations(state, from_pos: Position, piece: Piece) -> Iterator[Position]:
    board = state.board
    kind = piece.kind
    if kind is PieceKind.PAWN:
        yield from _pawn(state, from_pos, piece)
    elif kind is PieceKind.KNIGHT:
        yield from _stepping(board, from_pos, piece, KNIGHT_OFFSETS)
    elif kind is PieceKind.KING:
        yield from _stepping(board, from_pos, piece, KING_OFFSETS)
        yield from _castling(state, from_pos, piece)
    else:
        yield from _sliding(board, from_pos, piece, SLIDING_DIRECTIONS[kind])


def pseudo_legal_moves(state, from_pos) -> Set[Position]:
    """Destinations matching the piece's pattern; empty when ``from_pos`` is empty."""
    from_pos = Position(*from_pos)
    piece = piece_at(state.board, from_pos)
    if piece is None:
        return set()
    return set(_destinations(state, from_pos, piece))


# ─── legality ──────────────────────────────────────────────────────────────

def _keeps_king_safe(state, from_pos: Position, to: Position, piece: Piece) -> bool:
    scratch = thaw(state.board)
    if (piece.kind is PieceKind.PAWN and from_pos.col != to.col
            and scratch[to.row][to.col] is None):
        scratch[from_pos.row][to.col] = None
    scratch[to.row][to.col] = piece
    scratch[from_pos.row][from_pos.col] = None
    return not king_in_check_on(scratch, piece.color)


def _legal_destinations(state, from_pos: Position, piece: Piece) -> List[Position]:
    return [to for to in _destinations(state, from_pos, piece)
            if _keeps_king_safe(state, from_pos, to, piece)]


def legal_moves(state, from_pos) -> Set[Position]:
    """Legal destinations for the piece on ``from_pos``.

    Empty when the square is empty, off the board, or holds a piece of the
    side that is not on move.
    """
    from_pos = Position(*from_pos)
    piece = piece_at(state.board, from_pos)
    if piece is None or piece.color is not state.side_to_move:
        return set()
    return set(_legal_destinations(state, from_pos, piece))


def build_move(state, from_pos: Position, to: Position, piece: Piece) -> Move:
    """Describe ``piece`` moving ``from_pos`` -> ``to`` with every special-move flag set."""
    board = state.board
    captured = piece_at(board, to)
    is_en_passant = False
    is_castling = False
    is_promotion = False

    if piece.kind is PieceKind.PAWN:
        if from_pos.col != to.col and captured is None:
            captured = _en_passant_victim(board, from_pos, to, piece)
            is_en_passant = captured is not None
        is_promotion = to.row == PROMOTION_ROW[piece.color]
    elif piece.kind is PieceKind.KING:
        is_castling = abs(to.col - from_pos.col) == 2

    return Move(
        from_pos=from_pos,
        to_pos=to,
        piece=piece,
        captured_piece=captured,
        is_en_passant=is_en_passant,
        is_castling=is_castling,
        is_promotion=is_promotion,
        promotion_kind=PieceKind.QUEEN if is_promotion else None,
    )


def all_legal_moves(state, color: Color) -> List[Move]:
    """Every legal move for ``color``, in board-scan then per-piece order."""
    moves = []
    for from_pos, piece in iter_pieces(state.board, color):
        for to in _legal_destinations(state, from_pos, piece):
            moves.append(build_move(state, from_pos, to, piece))
    return moves


def has_legal_move(state, color: Color) -> bool:
    for from_pos, piece in iter_pieces(state.board, color):
        for to in _destinations(state, from_pos, piece):
            if _keeps_king_safe(state, from_pos, to, piece):
                return True
    return False


def pseudo_legal_move_list(state, color: Color) -> List[Move]:
    """Pattern-legal moves for ``color``. Callers must still reject self-check."""
    return [build_move(state, from_pos, to, piece)
            for from_pos, piece in iter_pieces(state.board, color)
            for to in _destinations(state, from_pos, piece)]
