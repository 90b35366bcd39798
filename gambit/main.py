"""Game session wrapper used by front ends.

``Engine`` keeps the current ``GameState`` and a stack of earlier states,
so undo is just dropping back to the previous value. Moves come in as
coordinate text (``"e2e4"``).
"""

import logging
import random
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, List, Optional

from gambit.config import CONFIG
from gambit.core.board import render
from gambit.core.game import GameState, apply_move, create_initial_state
from gambit.core.movegen import all_legal_moves, legal_moves
from gambit.core.notation import (
    move_to_uci,
    parse_square,
    parse_uci,
    san_history,
    square_name,
    state_from_fen,
    to_fen,
)
from gambit.core.pieces import Difficulty, GameStatus, Move
from gambit.core.search import choose_move

logger = logging.getLogger(__name__)


class Engine:
    def __init__(self, fen: Optional[str] = None, difficulty=None, rng: Optional[random.Random] = None):
        self._start = state_from_fen(fen) if fen else create_initial_state()
        self.state: GameState = self._start
        self._previous: List[GameState] = []
        self.move_history: List[str] = []
        self.difficulty = Difficulty(difficulty or CONFIG.search.default_difficulty)
        self.rng = rng or random.Random(CONFIG.search.random_seed)
        self._executor: Optional[ThreadPoolExecutor] = None
        self._future: Optional[Future] = None
        self._cancelled = threading.Event()

    # ─── position ──────────────────────────────────────────────────────────

    def reset(self):
        """Back to the position this session started from."""
        self.state = self._start
        self._previous.clear()
        self.move_history.clear()

    def get_fen(self) -> str:
        return to_fen(self.state)

    @property
    def status(self) -> GameStatus:
        return self.state.status

    def is_game_over(self) -> bool:
        return self.state.status.is_over

    def get_board_text(self) -> str:
        return render(self.state.board)

    def print_board(self):
        print(self.get_board_text())

    # ─── moves ─────────────────────────────────────────────────────────────

    def make_move(self, move_str: str) -> bool:
        """Play a coordinate move such as ``"e2e4"``. Returns True if it was legal."""
        try:
            from_pos, to_pos = parse_uci(move_str)
            new_state = apply_move(self.state, from_pos, to_pos)
        except ValueError as e:
            logger.info("Rejected move %r: %s", move_str, e)
            return False
        self._push(new_state)
        return True

    def undo_move(self):
        """Return to the state before the last move; a no-op at the start."""
        if self._previous:
            self.state = self._previous.pop()
            self.move_history.pop()

    def legal_moves(self, square: Optional[str] = None) -> List[str]:
        """Legal destinations from ``square``, or every legal move of the side to move."""
        if square is not None:
            targets = legal_moves(self.state, parse_square(square))
            return sorted(square_name(t) for t in targets)
        return [move_to_uci(m) for m in all_legal_moves(self.state, self.state.side_to_move)]

    def san_moves(self) -> List[str]:
        if self._start.move_history or self._start.board != create_initial_state().board:
            raise ValueError("SAN history needs a game started from the initial position")
        return san_history(self.state)

    def _push(self, new_state: GameState):
        self._previous.append(self.state)
        self.state = new_state
        self.move_history.append(move_to_uci(new_state.last_move))

    # ─── AI ────────────────────────────────────────────────────────────────

    def get_best_move(self, difficulty=None) -> Optional[str]:
        move = self._choose(self.state, difficulty)
        return move_to_uci(move) if move else None

    def play_ai_move(self, difficulty=None) -> Optional[str]:
        """Let the AI move for the side to move. Returns the move played, if any."""
        if self.is_game_over():
            return None
        move = self._choose(self.state, difficulty)
        if move is None:
            return None
        self._push(apply_move(self.state, move.from_pos, move.to_pos))
        return move_to_uci(move)

    def start_search(self, difficulty=None,
                     callback: Optional[Callable[[Optional[Move], GameState], None]] = None) -> Future:
        """Run the AI search on a worker thread.

        The callback receives the chosen move and the state it was searched
        from; callers should drop the result if ``self.state`` moved on.
        The callback is skipped once ``stop()`` has been called.
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="gambit-search")
        snapshot = self.state
        cancelled = self._cancelled = threading.Event()

        def worker():
            move = self._choose(snapshot, difficulty)
            if callback and not cancelled.is_set():
                callback(move, snapshot)
            return move

        self._future = self._executor.submit(worker)
        return self._future

    def stop(self):
        """Abandon the background search.

        A search that already started still runs to the end on its worker
        thread, but its callback is not called.
        """
        self._cancelled.set()
        if self._future is not None:
            self._future.cancel()
            self._future = None
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    def _choose(self, state: GameState, difficulty) -> Optional[Move]:
        level = Difficulty(difficulty or self.difficulty)
        return choose_move(state, state.side_to_move, level, rng=self.rng)
