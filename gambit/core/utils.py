"""Search diagnostics."""

import logging

from .notation import move_to_uci

logger = logging.getLogger("gambit.search")

# Anything beyond this is a forced mate rather than a material count.
MATE_THRESHOLD = 9000


def log_search_info(difficulty, depth, score, nodes, elapsed, best_move):
    nps = int(nodes / elapsed) if elapsed > 0 else 0
    best = move_to_uci(best_move) if best_move is not None else "-"

    if abs(score) > MATE_THRESHOLD:
        score_str = f"mate {'+' if score > 0 else '-'}"
    else:
        score_str = f"material {score:+d}"

    logger.debug(
        "difficulty %s depth %d score %s nodes %d nps %d time %dms best %s",
        difficulty, depth, score_str, nodes, nps, int(elapsed * 1000), best,
    )
