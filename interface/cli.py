"""Terminal game against the AI."""

import argparse
import sys
from typing import Callable, List, Optional

from gambit.config import CONFIG, Config, configure_logging
from gambit.core.evaluator import material_advantage
from gambit.core.pieces import Color, Difficulty, GameStatus
from gambit.main import Engine

HELP = "commands: <move> (e2e4) | moves <square> | undo | fen | history | help | quit"


def _status_line(engine: Engine) -> str:
    state = engine.state
    if state.status is GameStatus.CHECKMATE:
        return f"Checkmate. {state.winner.value.capitalize()} wins."
    if state.status is GameStatus.STALEMATE:
        return "Stalemate."
    if state.status is GameStatus.DRAW:
        return "Draw by insufficient material."
    line = f"{state.side_to_move.value.capitalize()} to move"
    if state.status is GameStatus.CHECK:
        line += " (check)"
    advantage = material_advantage(state.captured)
    if advantage:
        leader = "White" if advantage > 0 else "Black"
        line += f" | {leader} +{abs(advantage)}"
    return line


def run(engine: Engine, human: Color, input_fn: Optional[Callable[[str], str]] = None,
        output: Callable[[str], None] = print, show_san: bool = True) -> None:
    input_fn = input_fn or input
    output(HELP)
    while not engine.is_game_over():
        output("")
        output(engine.get_board_text())
        output(_status_line(engine))

        if engine.state.side_to_move is not human:
            move = engine.play_ai_move()
            output(f"Engine plays: {move}")
            continue

        try:
            command = input_fn("> ").strip()
        except EOFError:
            return
        if not command:
            continue
        if command in ("quit", "exit"):
            return
        if command == "help":
            output(HELP)
        elif command == "undo":
            # Take back the engine's reply as well as our own move.
            engine.undo_move()
            if engine.state.side_to_move is not human:
                engine.undo_move()
        elif command == "fen":
            output(engine.get_fen())
        elif command == "history":
            moves = engine.san_moves() if show_san else engine.move_history
            output(" ".join(moves) or "(no moves)")
        elif command.startswith("moves"):
            parts = command.split()
            if len(parts) != 2:
                output("usage: moves <square>")
                continue
            try:
                output(" ".join(engine.legal_moves(parts[1])) or "(none)")
            except ValueError as e:
                output(str(e))
        elif not engine.make_move(command):
            output("Illegal move, try again.")

    output("")
    output(engine.get_board_text())
    output(_status_line(engine))


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="gambit-cli", description="Play chess against the Gambit AI.")
    parser.add_argument("--difficulty", choices=[d.value for d in Difficulty])
    parser.add_argument("--color", choices=[c.value for c in Color], help="side you play")
    parser.add_argument("--fen", help="start from this position instead of the initial one")
    parser.add_argument("--config", help="TOML config file")
    args = parser.parse_args(argv)

    cfg = Config.load_from_toml(args.config) if args.config else CONFIG
    configure_logging(cfg.log_level)

    try:
        engine = Engine(fen=args.fen, difficulty=args.difficulty or cfg.search.default_difficulty)
    except ValueError as e:
        print(e, file=sys.stderr)
        return 2

    human = Color(args.color or cfg.ui.human_color)
    print(f"{cfg.ui.engine_name}: you play {human.value}, difficulty {engine.difficulty.value}")
    # SAN needs the standard start; FEN games fall back to coordinates.
    run(engine, human, show_san=cfg.ui.show_san and not args.fen)
    return 0


if __name__ == "__main__":
    sys.exit(main())
