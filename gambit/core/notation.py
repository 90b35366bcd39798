"""Square names, coordinate move text, and FEN/SAN interop via python-chess.

Row 0 of the grid is rank 8, so ``(6, 4)`` is ``"e2"``.
"""

from dataclasses import replace
from typing import List, Tuple

import chess

from .board import (
    BACK_RANK,
    HOME_ROW,
    KING_COL,
    KING_SIDE_ROOK_COL,
    PAWN_START_ROW,
    QUEEN_SIDE_ROOK_COL,
    empty_board,
    freeze,
    is_valid_position,
    iter_pieces,
    thaw,
)
from .game import GameState, apply_move, classify, create_initial_state
from .pieces import CastlingRights, Color, GameStatus, Move, Piece, PieceKind, Position

FILES = "abcdefgh"

_KIND_TO_CHESS = {
    PieceKind.PAWN: chess.PAWN,
    PieceKind.KNIGHT: chess.KNIGHT,
    PieceKind.BISHOP: chess.BISHOP,
    PieceKind.ROOK: chess.ROOK,
    PieceKind.QUEEN: chess.QUEEN,
    PieceKind.KING: chess.KING,
}
_CHESS_TO_KIND = {v: k for k, v in _KIND_TO_CHESS.items()}

_ROOK_CORNERS = (
    ("white_king_side", chess.BB_H1),
    ("white_queen_side", chess.BB_A1),
    ("black_king_side", chess.BB_H8),
    ("black_queen_side", chess.BB_A8),
)


# ─── squares and coordinate moves ──────────────────────────────────────────

def square_name(pos) -> str:
    if not is_valid_position(pos):
        raise ValueError(f"Square off the board: {tuple(pos)}")
    row, col = pos
    return f"{FILES[col]}{8 - row}"


def parse_square(text: str) -> Position:
    text = text.strip().lower()
    if len(text) != 2 or text[0] not in FILES or text[1] not in "12345678":
        raise ValueError(f"Invalid square: {text!r}")
    return Position(8 - int(text[1]), FILES.index(text[0]))


def move_to_uci(move: Move) -> str:
    suffix = "q" if move.is_promotion else ""
    return square_name(move.from_pos) + square_name(move.to_pos) + suffix


def parse_uci(text: str) -> Tuple[Position, Position]:
    """Split ``"e2e4"`` (or ``"e7e8q"``) into origin and destination.

    Pawns always promote to a queen, so ``q`` is the only accepted suffix.
    """
    text = text.strip().lower()
    if len(text) == 5:
        if text[4] != "q":
            raise ValueError(f"Only queen promotion is supported: {text!r}")
        text = text[:4]
    if len(text) != 4:
        raise ValueError(f"Invalid move text: {text!r}")
    return parse_square(text[:2]), parse_square(text[2:])


def describe_move(move: Move) -> str:
    """Move-list entry such as ``"e2 → e4"``."""
    return f"{square_name(move.from_pos)} → {square_name(move.to_pos)}"


# ─── python-chess bridge ───────────────────────────────────────────────────

def _to_chess_square(pos: Position) -> int:
    return chess.square(pos.col, 7 - pos.row)


def _from_chess_square(square: int) -> Position:
    return Position(7 - chess.square_rank(square), chess.square_file(square))


def to_chess_board(state: GameState) -> chess.Board:
    board = chess.Board(None)
    for pos, piece in iter_pieces(state.board):
        board.set_piece_at(
            _to_chess_square(pos),
            chess.Piece(_KIND_TO_CHESS[piece.kind], piece.color is Color.WHITE),
        )
    board.turn = state.side_to_move is Color.WHITE

    mask = chess.BB_EMPTY
    for attr, corner in _ROOK_CORNERS:
        if getattr(state.castling_rights, attr):
            mask |= corner
    board.castling_rights = mask

    if state.en_passant_target is not None:
        board.ep_square = _to_chess_square(state.en_passant_target)
    board.halfmove_clock = state.halfmove_clock
    board.fullmove_number = state.fullmove_number
    return board


def to_fen(state: GameState) -> str:
    # "fen" keeps the en-passant square after every double push.
    return to_chess_board(state).fen(en_passant="fen")


def _starts_unmoved(kind: PieceKind, color: Color, pos: Position, rights: CastlingRights) -> bool:
    home = HOME_ROW[color]
    if kind is PieceKind.PAWN:
        return pos.row == PAWN_START_ROW[color]
    if pos.row != home:
        return False
    if kind is PieceKind.KING:
        return pos.col == KING_COL and (rights.king_side(color) or rights.queen_side(color))
    if kind is PieceKind.ROOK:
        return ((pos.col == KING_SIDE_ROOK_COL and rights.king_side(color))
                or (pos.col == QUEEN_SIDE_ROOK_COL and rights.queen_side(color)))
    return BACK_RANK[pos.col] is kind


def state_from_fen(fen: str) -> GameState:
    """Build a ``GameState`` from FEN.

    FEN carries no move flags, so a piece counts as unmoved only when it
    stands on its starting square (kings and rooks additionally need a
    matching castling right).
    """
    try:
        board = chess.Board(fen)
    except ValueError as e:
        raise ValueError(f"Invalid FEN: {e}") from e

    castling = board.clean_castling_rights()
    rights = CastlingRights(**{attr: bool(castling & corner) for attr, corner in _ROOK_CORNERS})

    rows = thaw(empty_board())
    for square, chess_piece in board.piece_map().items():
        pos = _from_chess_square(square)
        kind = _CHESS_TO_KIND[chess_piece.piece_type]
        color = Color.WHITE if chess_piece.color == chess.WHITE else Color.BLACK
        rows[pos.row][pos.col] = Piece(kind, color, not _starts_unmoved(kind, color, pos, rights))

    side = Color.WHITE if board.turn == chess.WHITE else Color.BLACK
    state = GameState(
        board=freeze(rows),
        side_to_move=side,
        en_passant_target=_from_chess_square(board.ep_square) if board.ep_square is not None else None,
        castling_rights=rights,
        halfmove_clock=board.halfmove_clock,
        fullmove_number=board.fullmove_number,
    )
    status = classify(state)
    winner = side.opponent if status is GameStatus.CHECKMATE else None
    return replace(state, status=status, winner=winner)


def to_san(state: GameState, move: Move) -> str:
    """Standard algebraic notation for ``move`` played from ``state``."""
    board = to_chess_board(state)
    return board.san(chess.Move.from_uci(move_to_uci(move)))


def san_history(state: GameState) -> List[str]:
    """SAN move list for a game that began at the standard initial position."""
    sans = []
    current = create_initial_state()
    for move in state.move_history:
        sans.append(to_san(current, move))
        current = apply_move(current, move.from_pos, move.to_pos)
    return sans
