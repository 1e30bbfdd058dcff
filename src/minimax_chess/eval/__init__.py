"""Static evaluation.

Pure, deterministic, and side-effect free. Material only: no positional,
mobility or king-safety terms.
"""

from __future__ import annotations

from typing import Dict, Final

from minimax_chess.engine.board import Board
from minimax_chess.engine.pieces import (
    BISHOP,
    KING,
    KNIGHT,
    PAWN,
    QUEEN,
    ROOK,
    WHITE,
    piece_color,
    piece_type,
)


# Material values in centipawns
P_VAL: Final = 100
N_VAL: Final = 320
B_VAL: Final = 330
R_VAL: Final = 500
Q_VAL: Final = 900
K_VAL: Final = 20000

PIECE_VALUES: Final[Dict[int, int]] = {
    PAWN: P_VAL,
    KNIGHT: N_VAL,
    BISHOP: B_VAL,
    ROOK: R_VAL,
    QUEEN: Q_VAL,
    KING: K_VAL,
}


def evaluate(board: Board) -> int:
    """Return the material balance in centipawns, positive favouring White."""
    score = 0
    for piece in board.squares:
        if piece is None:
            continue
        value = PIECE_VALUES[piece_type(piece)]
        score += value if piece_color(piece) == WHITE else -value
    return score
