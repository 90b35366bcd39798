"""
Integration test suite for the Gambit chess engine.

Tests components working together end-to-end:
- Full game simulations (random and searching players), checked move by
  move against python-chess
- Engine session wrapper (moves, undo, FEN, background search)
- Terminal front end
- Configuration loading
"""

import random
import threading

import chess
import pytest

from gambit.config import Config, configure_logging
from gambit.core.board import find_king, iter_pieces
from gambit.core.game import apply_move, create_initial_state
from gambit.core.movegen import all_legal_moves
from gambit.core.notation import move_to_uci, san_history, to_fen
from gambit.core.pieces import Color, Difficulty, GameStatus, PieceKind
from gambit.core.search import choose_move
from gambit.main import Engine
from interface import cli

# ════════════════════════════════════════════════════════════════════════════
#  FULL GAME SIMULATIONS
# ════════════════════════════════════════════════════════════════════════════


class TestFullGame:
    """Games played through the public operations must stay consistent with python-chess."""

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_random_game_matches_python_chess(self, seed):
        rng = random.Random(seed)
        state = create_initial_state()
        board = chess.Board()

        for _ in range(150):
            if state.status.is_over:
                break
            ours = sorted(move_to_uci(m) for m in all_legal_moves(state, state.side_to_move))
            theirs = sorted(m.uci() for m in board.legal_moves if m.promotion in (None, chess.QUEEN))
            assert ours == theirs
            assert (state.status is GameStatus.CHECK) == board.is_check()

            move = choose_move(state, state.side_to_move, Difficulty.EASY, rng=rng)
            state = apply_move(state, move.from_pos, move.to_pos)
            board.push(chess.Move.from_uci(move_to_uci(move)))

            assert to_fen(state).split()[0] == board.board_fen()
            assert find_king(state.board, Color.WHITE) is not None
            assert find_king(state.board, Color.BLACK) is not None

        if state.status is GameStatus.CHECKMATE:
            assert board.is_checkmate()
            assert state.winner is state.side_to_move.opponent
        elif state.status is GameStatus.STALEMATE:
            assert board.is_stalemate()
        elif state.status is GameStatus.DRAW:
            assert board.is_insufficient_material()

    def test_history_is_replayable(self):
        rng = random.Random(11)
        state = create_initial_state()
        for _ in range(40):
            if state.status.is_over:
                break
            move = choose_move(state, state.side_to_move, Difficulty.EASY, rng=rng)
            state = apply_move(state, move.from_pos, move.to_pos)

        replay = create_initial_state()
        for move in state.move_history:
            replay = apply_move(replay, move.from_pos, move.to_pos)
        assert replay == state
        assert len(san_history(state)) == len(state.move_history)

    def test_captured_pieces_account_for_material(self):
        rng = random.Random(5)
        state = create_initial_state()
        for _ in range(80):
            if state.status.is_over:
                break
            move = choose_move(state, state.side_to_move, Difficulty.EASY, rng=rng)
            state = apply_move(state, move.from_pos, move.to_pos)

        on_board = sum(1 for _ in iter_pieces(state.board))
        captured = len(state.captured.white) + len(state.captured.black)
        assert on_board + captured == 32
        assert all(p.kind is not PieceKind.KING for p in state.captured.white + state.captured.black)

    def test_medium_vs_easy_plays_legal_moves(self):
        rng = random.Random(3)
        state = create_initial_state()
        for ply in range(16):
            if state.status.is_over:
                break
            level = Difficulty.MEDIUM if ply % 2 == 0 else Difficulty.EASY
            move = choose_move(state, state.side_to_move, level, rng=rng)
            assert move in all_legal_moves(state, state.side_to_move)
            state = apply_move(state, move.from_pos, move.to_pos)
        assert len(state.move_history) > 0


# ════════════════════════════════════════════════════════════════════════════
#  ENGINE WRAPPER
# ════════════════════════════════════════════════════════════════════════════


class TestEngineWrapper:
    def test_initial_position(self):
        engine = Engine()
        assert engine.get_fen() == chess.STARTING_FEN
        assert engine.status is GameStatus.ACTIVE
        assert len(engine.legal_moves()) == 20

    def test_make_legal_move(self):
        engine = Engine()
        assert engine.make_move("e2e4") is True
        assert engine.move_history == ["e2e4"]
        assert engine.get_fen() == "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq e3 0 1"

    def test_make_illegal_move(self):
        engine = Engine()
        assert engine.make_move("e2e5") is False
        assert engine.move_history == []

    def test_make_garbage_input(self):
        engine = Engine()
        assert engine.make_move("zzzz") is False
        assert engine.make_move("") is False
        assert engine.make_move("12345") is False

    def test_undo_move(self):
        engine = Engine()
        engine.make_move("e2e4")
        engine.make_move("e7e5")
        engine.undo_move()
        engine.undo_move()
        assert engine.get_fen() == chess.STARTING_FEN
        assert engine.move_history == []

    def test_undo_empty(self):
        engine = Engine()
        engine.undo_move()
        assert engine.get_fen() == chess.STARTING_FEN

    def test_reset(self):
        engine = Engine()
        engine.make_move("e2e4")
        engine.reset()
        assert engine.get_fen() == chess.STARTING_FEN

    def test_reset_returns_to_start_fen(self):
        fen = "8/P7/8/8/8/8/8/4K2k w - - 0 1"
        engine = Engine(fen=fen)
        engine.make_move("a7a8q")
        engine.reset()
        assert engine.get_fen() == fen

    def test_square_destinations(self):
        engine = Engine()
        assert engine.legal_moves("e2") == ["e3", "e4"]
        assert engine.legal_moves("e7") == []

    def test_checkmate_from_fen(self):
        engine = Engine(fen="rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 0 1")
        assert engine.legal_moves() == []
        assert engine.is_game_over()
        assert engine.state.winner is Color.BLACK
        assert engine.play_ai_move() is None

    def test_en_passant_move(self):
        engine = Engine(fen="rnbqkbnr/ppp1p1pp/8/3pPp2/8/8/PPPP1PPP/RNBQKBNR w KQkq f6 0 3")
        assert engine.make_move("e5f6") is True
        assert engine.state.last_move.is_en_passant

    def test_castling_move(self):
        engine = Engine(fen="r3k2r/pppppppp/8/8/8/8/PPPPPPPP/R3K2R w KQkq - 0 1")
        assert engine.make_move("e1g1") is True
        assert engine.state.last_move.is_castling

    def test_promotion_move(self):
        for text in ("a7a8q", "a7a8"):
            engine = Engine(fen="8/P7/8/8/8/8/8/4K2k w - - 0 1")
            assert engine.make_move(text) is True
        engine = Engine(fen="8/P7/8/8/8/8/8/4K2k w - - 0 1")
        assert engine.make_move("a7a8n") is False

    def test_play_ai_move(self):
        engine = Engine(difficulty="easy", rng=random.Random(0))
        legal = engine.legal_moves()
        played = engine.play_ai_move()
        assert played in legal
        assert engine.state.side_to_move is Color.BLACK
        assert engine.move_history == [played]

    def test_get_best_move_does_not_play(self):
        engine = Engine(fen="6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1")
        assert engine.get_best_move("medium") == "a1a8"
        assert engine.move_history == []

    def test_san_moves(self):
        engine = Engine()
        for text in ("f2f3", "e7e5", "g2g4", "d8h4"):
            assert engine.make_move(text)
        assert engine.san_moves() == ["f3", "e5", "g4", "Qh4#"]
        assert engine.status is GameStatus.CHECKMATE

    def test_san_moves_needs_standard_start(self):
        engine = Engine(fen="8/P7/8/8/8/8/8/4K2k w - - 0 1")
        with pytest.raises(ValueError):
            engine.san_moves()

    def test_start_search_runs_in_background(self):
        engine = Engine(fen="6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1")
        received = []
        done = threading.Event()

        def callback(move, snapshot):
            received.append((move, snapshot))
            done.set()

        future = engine.start_search("medium", callback=callback)
        move = future.result(timeout=60)
        assert done.wait(timeout=5)
        assert move_to_uci(move) == "a1a8"
        assert received[0][1] is engine.state
        engine.stop()

    def test_stop_before_start_is_safe(self):
        engine = Engine()
        engine.stop()

    def test_stop_suppresses_callback_of_running_search(self):
        engine = Engine()
        started = threading.Event()
        release = threading.Event()
        calls = []

        def slow_choose(state, difficulty):
            started.set()
            release.wait(timeout=5)
            return None

        engine._choose = slow_choose
        future = engine.start_search(callback=lambda move, snapshot: calls.append(move))
        assert started.wait(timeout=5)
        engine.stop()
        release.set()
        assert future.result(timeout=5) is None
        assert calls == []


# ════════════════════════════════════════════════════════════════════════════
#  TERMINAL FRONT END
# ════════════════════════════════════════════════════════════════════════════


def scripted(lines):
    it = iter(lines)

    def _input(prompt=""):
        try:
            return next(it)
        except StopIteration:
            raise EOFError
    return _input


class TestCli:
    def test_session_commands(self):
        engine = Engine(difficulty="easy", rng=random.Random(1))
        out = []
        cli.run(engine, Color.WHITE, input_fn=scripted(
            ["help", "xx", "moves e2", "e2e4", "history", "undo", "fen", "quit"]
        ), output=out.append)

        assert "Illegal move, try again." in out
        assert "e3 e4" in out
        assert any(line.startswith("Engine plays: ") for line in out)
        assert chess.STARTING_FEN in out
        assert engine.move_history == []

    def test_history_lists_san(self):
        engine = Engine(difficulty="easy", rng=random.Random(1))
        out = []
        cli.run(engine, Color.WHITE, input_fn=scripted(["e2e4", "history", "quit"]), output=out.append)
        assert any(line.startswith("e4 ") for line in out)

    def test_game_over_ends_loop(self):
        engine = Engine(fen="rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 0 1")
        out = []
        cli.run(engine, Color.WHITE, input_fn=scripted([]), output=out.append)
        assert out[-1] == "Checkmate. Black wins."

    def test_engine_moves_first_for_black_human(self):
        engine = Engine(difficulty="easy", rng=random.Random(2))
        out = []
        cli.run(engine, Color.BLACK, input_fn=scripted(["quit"]), output=out.append)
        assert len(engine.move_history) == 1

    def test_eof_exits(self):
        engine = Engine()
        cli.run(engine, Color.WHITE, input_fn=scripted([]), output=lambda line: None)
        assert engine.move_history == []

    def test_main_rejects_bad_fen(self, capsys):
        assert cli.main(["--fen", "not a fen"]) == 2

    def test_main_runs_until_eof(self, monkeypatch, capsys):
        def _eof(prompt=""):
            raise EOFError
        monkeypatch.setattr("builtins.input", _eof)
        assert cli.main(["--difficulty", "easy", "--color", "white"]) == 0
        assert "you play white" in capsys.readouterr().out


# ════════════════════════════════════════════════════════════════════════════
#  CONFIGURATION
# ════════════════════════════════════════════════════════════════════════════


class TestConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        cfg = Config.load_from_toml(str(tmp_path / "absent.toml"))
        assert cfg.search.default_difficulty == "medium"
        assert cfg.search.random_seed is None
        assert cfg.ui.human_color == "white"

    def test_load_from_toml(self, tmp_path):
        path = tmp_path / "gambit.toml"
        path.write_text(
            'log_level = "DEBUG"\n'
            "[search]\n"
            'default_difficulty = "hard"\n'
            "random_seed = 3\n"
            "unknown = 1\n"
            "[ui]\n"
            'human_color = "black"\n'
        )
        cfg = Config.load_from_toml(str(path))
        assert cfg.log_level == "DEBUG"
        assert cfg.search.default_difficulty == "hard"
        assert cfg.search.random_seed == 3
        assert cfg.ui.human_color == "black"
        assert not hasattr(cfg.search, "unknown")

    def test_invalid_difficulty_rejected(self, tmp_path):
        path = tmp_path / "gambit.toml"
        path.write_text('[search]\ndefault_difficulty = "impossible"\n')
        with pytest.raises(ValueError):
            Config.load_from_toml(str(path))

    def test_unknown_log_level_rejected(self, tmp_path):
        path = tmp_path / "gambit.toml"
        path.write_text('log_level = "verbose"\n')
        with pytest.raises(ValueError, match="log_level"):
            Config.load_from_toml(str(path))

    def test_log_level_is_case_insensitive(self, tmp_path):
        path = tmp_path / "gambit.toml"
        path.write_text('log_level = "info"\n')
        assert Config.load_from_toml(str(path)).log_level == "info"

    def test_section_must_be_a_table(self, tmp_path):
        path = tmp_path / "gambit.toml"
        path.write_text("search = 3\n")
        with pytest.raises(ValueError, match=r"\[search\] must be a table"):
            Config.load_from_toml(str(path))

    def test_cli_uses_config_file(self, tmp_path, monkeypatch, capsys):
        path = tmp_path / "gambit.toml"
        path.write_text('[search]\ndefault_difficulty = "easy"\n[ui]\nengine_name = "Tester"\n')

        def _eof(prompt=""):
            raise EOFError
        monkeypatch.setattr("builtins.input", _eof)
        assert cli.main(["--config", str(path)]) == 0
        out = capsys.readouterr().out
        assert "Tester" in out
        assert "difficulty easy" in out

    def test_configure_logging_accepts_level(self):
        configure_logging("debug")
