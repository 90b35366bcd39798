"""Game state machine.

``apply_move`` is the only way to advance a game. It never edits the state
it is given; each accepted move yields a brand-new ``GameState``.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from .attacks import is_in_check
from .board import (
    HOME_ROW,
    KING_SIDE_ROOK_COL,
    QUEEN_SIDE_ROOK_COL,
    Board,
    MutableBoard,
    freeze,
    initial_board,
    iter_pieces,
    thaw,
)
from .movegen import build_move, has_legal_move, legal_moves
from .pieces import (
    CapturedPieces,
    CastlingRights,
    Color,
    GameStatus,
    Move,
    Piece,
    PieceKind,
    Position,
)

logger = logging.getLogger(__name__)


class InvalidMove(ValueError):
    """Raised when a requested move is not legal in the given state."""

    def __init__(self, from_pos, to_pos, reason: str = "illegal move"):
        self.from_pos = from_pos
        self.to_pos = to_pos
        self.reason = reason
        super().__init__(f"{reason}: {tuple(from_pos)} -> {tuple(to_pos)}")


@dataclass(frozen=True)
class GameState:
    board: Board
    side_to_move: Color = Color.WHITE
    status: GameStatus = GameStatus.ACTIVE
    winner: Optional[Color] = None
    move_history: Tuple[Move, ...] = ()
    captured: CapturedPieces = field(default_factory=CapturedPieces)
    en_passant_target: Optional[Position] = None
    castling_rights: CastlingRights = field(default_factory=CastlingRights)
    halfmove_clock: int = 0
    fullmove_number: int = 1

    @property
    def last_move(self) -> Optional[Move]:
        return self.move_history[-1] if self.move_history else None


def create_initial_state() -> GameState:
    """Standard starting position, white to move, all castling rights."""
    return GameState(board=initial_board())


# ─── move application helpers (shared with the search) ─────────────────────

def rook_castling_squares(move: Move) -> Tuple[Position, Position]:
    """(from, to) of the rook that accompanies a castling king move."""
    row = move.from_pos.row
    if move.to_pos.col > move.from_pos.col:
        return Position(row, KING_SIDE_ROOK_COL), Position(row, move.to_pos.col - 1)
    return Position(row, QUEEN_SIDE_ROOK_COL), Position(row, move.to_pos.col + 1)


def place_move(rows: MutableBoard, move: Move) -> None:
    """Write ``move`` onto a mutable grid, including its rook or victim side effects."""
    src, dst = move.from_pos, move.to_pos
    if move.is_en_passant:
        rows[src.row][dst.col] = None
    if move.is_promotion:
        rows[dst.row][dst.col] = Piece(move.promotion_kind, move.piece.color, True)
    else:
        rows[dst.row][dst.col] = move.piece.moved()
    rows[src.row][src.col] = None
    if move.is_castling:
        rook_from, rook_to = rook_castling_squares(move)
        rook = rows[rook_from.row][rook_from.col]
        rows[rook_to.row][rook_to.col] = rook.moved()
        rows[rook_from.row][rook_from.col] = None


def updated_castling_rights(rights: CastlingRights, move: Move) -> CastlingRights:
    color = move.piece.color
    if move.piece.kind is PieceKind.KING:
        rights = rights.revoke(color)
    elif move.piece.kind is PieceKind.ROOK and move.from_pos.row == HOME_ROW[color]:
        rights = _revoke_for_corner(rights, color, move.from_pos.col)

    # A capture on the opponent's rook corner removes that side's right.
    if move.captured_piece is not None and not move.is_en_passant:
        enemy = color.opponent
        if move.to_pos.row == HOME_ROW[enemy]:
            rights = _revoke_for_corner(rights, enemy, move.to_pos.col)
    return rights


def _revoke_for_corner(rights: CastlingRights, color: Color, col: int) -> CastlingRights:
    if col == KING_SIDE_ROOK_COL:
        return rights.revoke(color, king_side=True, queen_side=False)
    if col == QUEEN_SIDE_ROOK_COL:
        return rights.revoke(color, king_side=False, queen_side=True)
    return rights


def en_passant_target_after(move: Move) -> Optional[Position]:
    if move.piece.kind is PieceKind.PAWN and abs(move.to_pos.row - move.from_pos.row) == 2:
        return Position((move.from_pos.row + move.to_pos.row) // 2, move.from_pos.col)
    return None


# ─── public operations ─────────────────────────────────────────────────────

def apply_move(state: GameState, from_pos, to_pos) -> GameState:
    """Play ``from_pos`` -> ``to_pos`` and return the resulting state.

    Raises:
        InvalidMove: the game is over or ``to_pos`` is not a legal
            destination for the piece on ``from_pos``.
    """
    from_pos, to_pos = Position(*from_pos), Position(*to_pos)
    if state.status.is_over:
        logger.debug("Rejected %s -> %s: game is over (%s)", from_pos, to_pos, state.status.value)
        raise InvalidMove(from_pos, to_pos, f"game is over ({state.status.value})")
    if to_pos not in legal_moves(state, from_pos):
        logger.debug("Rejected %s -> %s: not a legal destination", from_pos, to_pos)
        raise InvalidMove(from_pos, to_pos)

    piece = state.board[from_pos.row][from_pos.col]
    move = build_move(state, from_pos, to_pos, piece)

    rows = thaw(state.board)
    place_move(rows, move)

    captured = state.captured
    if move.captured_piece is not None:
        captured = captured.add(move.captured_piece)

    resets_clock = piece.kind is PieceKind.PAWN or move.captured_piece is not None
    next_state = replace(
        state,
        board=freeze(rows),
        side_to_move=piece.color.opponent,
        captured=captured,
        en_passant_target=en_passant_target_after(move),
        castling_rights=updated_castling_rights(state.castling_rights, move),
        halfmove_clock=0 if resets_clock else state.halfmove_clock + 1,
        fullmove_number=state.fullmove_number + (1 if piece.color is Color.BLACK else 0),
        move_history=state.move_history + (move,),
    )

    status = classify(next_state)
    winner = piece.color if status is GameStatus.CHECKMATE else None
    return replace(next_state, status=status, winner=winner)


def is_insufficient_material(board) -> bool:
    """Bare kings, or bare kings plus a single bishop or knight."""
    extras = [piece.kind for _, piece in iter_pieces(board) if piece.kind is not PieceKind.KING]
    if not extras:
        return True
    return len(extras) == 1 and extras[0] in (PieceKind.BISHOP, PieceKind.KNIGHT)


def classify(state) -> GameStatus:
    color = state.side_to_move
    in_check = is_in_check(state, color)
    if not has_legal_move(state, color):
        return GameStatus.CHECKMATE if in_check else GameStatus.STALEMATE
    if in_check:
        return GameStatus.CHECK
    if is_insufficient_material(state.board):
        return GameStatus.DRAW
    return GameStatus.ACTIVE
