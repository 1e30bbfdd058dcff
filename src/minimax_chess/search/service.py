from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final, Optional, Tuple, Union

from minimax_chess.engine.board import Board
from minimax_chess.engine.move import Move
from minimax_chess.engine.pieces import BLACK, WHITE
from minimax_chess.eval import evaluate

if TYPE_CHECKING:
    from minimax_chess.engine.game import Game


logger = logging.getLogger(__name__)

# Mate sentinels: outside any reachable material score, inside the window
MATE_SCORE: Final = 1_000_000
INF: Final = 10_000_000


@dataclass
class SearchResult:
    best_move: Optional[Move]
    score: int
    nodes: int
    depth: int
    time_ms: int

    @property
    def mate(self) -> Optional[int]:
        """+1 when White forces mate, -1 when Black does, else None."""
        if self.score >= MATE_SCORE:
            return 1
        if self.score <= -MATE_SCORE:
            return -1
        return None

    @property
    def score_cp(self) -> Optional[int]:
        return None if self.mate is not None else self.score


class SearchService:
    """Fixed-depth minimax with alpha-beta pruning over material evaluation.

    Scores are always from White's point of view: White maximizes, Black
    minimizes, and the root's role follows the side to move. The search is
    synchronous and deterministic; the board is mutated in place and restored
    before returning.
    """

    def search(
        self,
        game: Union["Game", Board],
        depth: int = 1,
        *,
        enable_pruning: bool = True,
    ) -> SearchResult:
        """Search ``depth`` plies from the current position.

        Args:
            game: Game (or bare board) whose position is searched.
            depth: Plies to search. ``depth <= 0`` returns the static
                evaluation with no move.
            enable_pruning: Cut off siblings once ``beta <= alpha``. Disabling
                it yields the plain minimax over the same tree.

        Returns:
            SearchResult: Best move (first found on ties), its score, and the
            number of make calls performed during this search.
        """
        board = game if isinstance(game, Board) else game.board
        board.nodes = 0
        start = time.perf_counter()

        def minimax(d: int, alpha: int, beta: int, maximizing: bool) -> Tuple[int, Optional[Move]]:
            if d <= 0:
                return evaluate(board), None

            color = WHITE if maximizing else BLACK
            moves = board.generate_legal_moves(color)
            if not moves:
                if board.in_check(color):
                    # Worst possible score for the side with no moves
                    return (-MATE_SCORE if maximizing else MATE_SCORE), None
                return 0, None

            best_move: Optional[Move] = None
            if maximizing:
                best = -INF
                for m in moves:
                    undo = board.make_move(m)
                    try:
                        score, _ = minimax(d - 1, alpha, beta, False)
                    finally:
                        board.undo_move(undo)
                    if score > best:
                        best, best_move = score, m
                    alpha = max(alpha, score)
                    if enable_pruning and beta <= alpha:
                        break
            else:
                best = INF
                for m in moves:
                    undo = board.make_move(m)
                    try:
                        score, _ = minimax(d - 1, alpha, beta, True)
                    finally:
                        board.undo_move(undo)
                    if score < best:
                        best, best_move = score, m
                    beta = min(beta, score)
                    if enable_pruning and beta <= alpha:
                        break
            return best, best_move

        score, best_move = minimax(depth, -INF, INF, board.side_to_move == WHITE)
        result = SearchResult(
            best_move=best_move,
            score=score,
            nodes=board.nodes,
            depth=max(0, depth),
            time_ms=int((time.perf_counter() - start) * 1000),
        )
        logger.info(
            "search",
            extra={
                "depth": result.depth,
                "nodes": result.nodes,
                "score": result.score,
                "best_move": best_move.to_uci() if best_move else None,
                "time_ms": result.time_ms,
                "pruning": enable_pruning,
            },
        )
        return result
