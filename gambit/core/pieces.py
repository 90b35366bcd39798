"""Value types shared by every engine component.

All of these are immutable: a move never edits a piece, it replaces it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import NamedTuple, Optional, Tuple


class Color(str, Enum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE


class PieceKind(str, Enum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


class GameStatus(str, Enum):
    ACTIVE = "active"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW = "draw"

    @property
    def is_over(self) -> bool:
        return self in (GameStatus.CHECKMATE, GameStatus.STALEMATE, GameStatus.DRAW)


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# FEN-style letters, upper case for white.
PIECE_SYMBOLS = {
    PieceKind.PAWN: "p",
    PieceKind.KNIGHT: "n",
    PieceKind.BISHOP: "b",
    PieceKind.ROOK: "r",
    PieceKind.QUEEN: "q",
    PieceKind.KING: "k",
}


class Position(NamedTuple):
    """Board coordinate. Row 0 is black's home rank, column 0 is the a-file."""

    row: int
    col: int

    def offset(self, d_row: int, d_col: int) -> "Position":
        return Position(self.row + d_row, self.col + d_col)


@dataclass(frozen=True)
class Piece:
    kind: PieceKind
    color: Color
    has_moved: bool = False

    def moved(self) -> "Piece":
        """Copy of this piece with the moved flag set."""
        return self if self.has_moved else replace(self, has_moved=True)

    def symbol(self) -> str:
        letter = PIECE_SYMBOLS[self.kind]
        return letter.upper() if self.color is Color.WHITE else letter


@dataclass(frozen=True)
class Move:
    """Record of an accepted move. Built by the move generator, never by callers."""

    from_pos: Position
    to_pos: Position
    piece: Piece
    captured_piece: Optional[Piece] = None
    is_en_passant: bool = False
    is_castling: bool = False
    is_promotion: bool = False
    promotion_kind: Optional[PieceKind] = None

    @property
    def is_capture(self) -> bool:
        return self.captured_piece is not None


@dataclass(frozen=True)
class CastlingRights:
    white_king_side: bool = True
    white_queen_side: bool = True
    black_king_side: bool = True
    black_queen_side: bool = True

    def king_side(self, color: Color) -> bool:
        return self.white_king_side if color is Color.WHITE else self.black_king_side

    def queen_side(self, color: Color) -> bool:
        return self.white_queen_side if color is Color.WHITE else self.black_queen_side

    def revoke(self, color: Color, king_side: bool = True, queen_side: bool = True) -> "CastlingRights":
        """Drop rights for ``color``. Rights are never restored."""
        changes = {}
        if color is Color.WHITE:
            if king_side:
                changes["white_king_side"] = False
            if queen_side:
                changes["white_queen_side"] = False
        else:
            if king_side:
                changes["black_king_side"] = False
            if queen_side:
                changes["black_queen_side"] = False
        return replace(self, **changes) if changes else self

    @classmethod
    def none(cls) -> "CastlingRights":
        return cls(False, False, False, False)


@dataclass(frozen=True)
class CapturedPieces:
    """Captured pieces, keyed by the colour of the piece that was lost."""

    white: Tuple[Piece, ...] = ()
    black: Tuple[Piece, ...] = ()

    def of(self, color: Color) -> Tuple[Piece, ...]:
        return self.white if color is Color.WHITE else self.black

    def add(self, piece: Piece) -> "CapturedPieces":
        if piece.color is Color.WHITE:
            return replace(self, white=self.white + (piece,))
        return replace(self, black=self.black + (piece,))
