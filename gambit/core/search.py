"""AI move selection: minimax with alpha-beta pruning over material.

The search never touches the caller's ``GameState``. It copies the position
once into a ``ScratchPosition`` and walks the tree with push/pop, restoring
every square a move touched from an explicit undo record.
"""

import random
import time
from typing import List, Optional, Tuple

from .attacks import king_in_check_on
from .board import thaw
from .evaluator import PIECE_VALUES, evaluate
from .game import en_passant_target_after, place_move, rook_castling_squares, updated_castling_rights
from .movegen import all_legal_moves, pseudo_legal_move_list
from .pieces import Color, Difficulty, Move, Position
from .utils import log_search_info

INF = 1000000
MATE_SCORE = 10000

# Plies searched per tier; EASY picks uniformly at random instead.
DIFFICULTY_DEPTHS = {
    Difficulty.MEDIUM: 2,
    Difficulty.HARD: 4,
}


class ScratchPosition:
    """Mutable copy of a position supporting push/pop."""

    def __init__(self, state, side_to_move: Color):
        self.board = thaw(state.board)
        self.side_to_move = side_to_move
        self.en_passant_target = state.en_passant_target
        self.castling_rights = state.castling_rights
        self._stack: List[Tuple] = []

    def push(self, move: Move) -> None:
        touched = [move.from_pos, move.to_pos]
        if move.is_en_passant:
            touched.append(Position(move.from_pos.row, move.to_pos.col))
        if move.is_castling:
            touched.extend(rook_castling_squares(move))
        saved = [(sq, self.board[sq.row][sq.col]) for sq in touched]
        self._stack.append((saved, self.side_to_move, self.en_passant_target, self.castling_rights))

        place_move(self.board, move)
        self.side_to_move = self.side_to_move.opponent
        self.en_passant_target = en_passant_target_after(move)
        self.castling_rights = updated_castling_rights(self.castling_rights, move)

    def pop(self) -> None:
        saved, self.side_to_move, self.en_passant_target, self.castling_rights = self._stack.pop()
        for sq, piece in saved:
            self.board[sq.row][sq.col] = piece


def _capture_order(move: Move) -> int:
    # Most valuable victim first; quiet moves keep generator order behind captures.
    return -PIECE_VALUES[move.captured_piece.kind] if move.captured_piece else 0


class SearchEngine:
    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.nodes = 0
        self.last_score: Optional[int] = None

    def choose_move(self, state, color: Color, difficulty) -> Optional[Move]:
        """Pick a move for ``color``, or None when it has no legal move."""
        difficulty = Difficulty(difficulty)
        moves = all_legal_moves(state, color)
        if not moves:
            return None
        if difficulty is Difficulty.EASY:
            return self.rng.choice(moves)

        depth = DIFFICULTY_DEPTHS[difficulty]
        self.nodes = 0
        start = time.time()
        position = ScratchPosition(state, color)

        best_move = moves[0]
        best_score = -INF
        alpha = -INF
        for move in moves:
            position.push(move)
            score = self._minimax(position, depth - 1, False, color, alpha, INF, 1)
            position.pop()
            if score > best_score:
                best_score = score
                best_move = move
            alpha = max(alpha, best_score)

        self.last_score = best_score
        log_search_info(difficulty.value, depth, best_score, self.nodes, time.time() - start, best_move)
        return best_move

    def _ordered_moves(self, position: ScratchPosition, mover: Color) -> List[Move]:
        """Legal moves inside the tree, captures first.

        Legality is checked by pushing each candidate and asking whether the
        mover's king is attacked, so no board copies are made.
        """
        moves = []
        for move in pseudo_legal_move_list(position, mover):
            position.push(move)
            if not king_in_check_on(position.board, mover):
                moves.append(move)
            position.pop()
        moves.sort(key=_capture_order)
        return moves

    def _minimax(self, position: ScratchPosition, depth: int, maximizing: bool,
                 ai_color: Color, alpha: int, beta: int, ply: int) -> int:
        """Score from ``ai_color``'s point of view."""
        self.nodes += 1
        if depth == 0:
            return evaluate(position.board, ai_color)

        mover = position.side_to_move
        moves = self._ordered_moves(position, mover)
        if not moves:
            if king_in_check_on(position.board, mover):
                # The side to move is mated; sooner mates score further from zero.
                return -(MATE_SCORE - ply) if maximizing else MATE_SCORE - ply
            return 0

        if maximizing:
            best = -INF
            for move in moves:
                position.push(move)
                score = self._minimax(position, depth - 1, False, ai_color, alpha, beta, ply + 1)
                position.pop()
                best = max(best, score)
                alpha = max(alpha, score)
                if alpha >= beta:
                    break
            return best

        best = INF
        for move in moves:
            position.push(move)
            score = self._minimax(position, depth - 1, True, ai_color, alpha, beta, ply + 1)
            position.pop()
            best = min(best, score)
            beta = min(beta, score)
            if alpha >= beta:
                break
        return best


def choose_move(state, color: Color, difficulty, rng: Optional[random.Random] = None) -> Optional[Move]:
    """Stateless entry point: a fresh ``SearchEngine`` per call."""
    return SearchEngine(rng).choose_move(state, color, difficulty)
