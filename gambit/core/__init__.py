"""Core engine components: board model, attack oracle, move generation, game state and search."""

from .attacks import is_in_check, is_square_attacked
from .board import Board, find_king, initial_board, is_valid_position, piece_at
from .evaluator import PIECE_VALUES, evaluate, material_advantage
from .game import GameState, InvalidMove, apply_move, classify, create_initial_state, is_insufficient_material
from .movegen import all_legal_moves, legal_moves, pseudo_legal_moves
from .pieces import (
    CapturedPieces,
    CastlingRights,
    Color,
    Difficulty,
    GameStatus,
    Move,
    Piece,
    PieceKind,
    Position,
)
from .search import SearchEngine, choose_move

__all__ = [
    "Board", "CapturedPieces", "CastlingRights", "Color", "Difficulty", "GameState",
    "GameStatus", "InvalidMove", "Move", "PIECE_VALUES", "Piece", "PieceKind", "Position",
    "SearchEngine", "all_legal_moves", "apply_move", "choose_move", "classify",
    "create_initial_state", "evaluate", "find_king", "initial_board", "is_in_check",
    "is_insufficient_material", "is_square_attacked", "is_valid_position", "legal_moves",
    "material_advantage", "piece_at", "pseudo_legal_moves",
]
