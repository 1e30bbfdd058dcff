from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import List, Optional

from minimax_chess.eval import evaluate
from minimax_chess.search.service import SearchResult, SearchService

from .board import Board
from .errors import IllegalMoveError
from .move import Move


logger = logging.getLogger(__name__)


@dataclass
class Game:
    """Game wrapper around a board with helper operations.

    Responsibility: validate and record played moves, undo them, report
    status, and ask the search for an engine reply. ``lock`` serializes
    callers that share one game across threads.
    """

    board: Board
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    @classmethod
    def new(cls) -> "Game":
        return cls(board=Board.startpos())

    @classmethod
    def from_fen(cls, fen: str) -> "Game":
        return cls(board=Board.from_fen(fen))

    def to_fen(self) -> str:
        return self.board.to_fen()

    def reset(self) -> None:
        self.board.reset()

    def legal_moves(self, color: Optional[str] = None) -> List[Move]:
        return self.board.generate_legal_moves(color)

    def resolve(self, move: Move) -> Move:
        """Return the generated legal move matching ``move``'s squares and promotion.

        Raises:
            IllegalMoveError: If no legal move for the side to move matches.
        """
        for m in self.board.generate_legal_moves():
            if m.same_squares(move):
                return m
        raise IllegalMoveError(move)

    def apply_move(self, move: Move) -> Move:
        """Validate ``move``, make it, and record it in the game history.

        Returns:
            Move: The applied move, carrying the generator's flags.
        """
        legal = self.resolve(move)
        self.board.make_move(legal, record=True)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("move applied", extra={"move": legal.to_uci(), "fen": self.to_fen()})
        return legal

    def undo_move(self) -> Move:
        """Take back the last recorded move.

        Raises:
            ValueError: If there is no move to undo.
        """
        undo = self.board.undo_last()
        logger.debug("move undone", extra={"move": undo.move.to_uci()})
        return undo.move

    # --- State flags ---
    def in_check(self, color: Optional[str] = None) -> bool:
        return self.board.in_check(color)

    def checkmate(self) -> bool:
        return (not self.board.has_legal_moves()) and self.board.in_check()

    def stalemate(self) -> bool:
        return (not self.board.has_legal_moves()) and (not self.board.in_check())

    def status(self) -> str:
        """Return ``"checkmate"``, ``"stalemate"``, ``"check"`` or ``"ongoing"``."""
        has_moves = self.board.has_legal_moves()
        checked = self.board.in_check()
        if not has_moves:
            return "checkmate" if checked else "stalemate"
        return "check" if checked else "ongoing"

    def evaluate(self) -> int:
        return evaluate(self.board)

    # --- Engine ---
    def search(self, depth: int, *, enable_pruning: bool = True) -> SearchResult:
        return SearchService().search(self, depth, enable_pruning=enable_pruning)

    def engine_move(self, depth: int) -> SearchResult:
        """Search ``depth`` plies and play the chosen move, if any."""
        res = self.search(depth)
        if res.best_move is not None:
            self.board.make_move(res.best_move, record=True)
            logger.debug("engine move", extra={"move": res.best_move.to_uci()})
        return res

    def move_history(self) -> List[Move]:
        return [undo.move for undo in self.board.history]

    def move_history_uci(self) -> List[str]:
        return [m.to_uci() for m in self.move_history()]
