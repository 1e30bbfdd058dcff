"""Attack detection.

Pure with respect to the position: only reads the square list it is given.
This is the single source of truth for check tests and for the castling
path tests in the move generator.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from .pieces import BISHOP, KING, KNIGHT, PAWN, QUEEN, ROOK, WHITE, make_piece


Offsets = Tuple[Tuple[int, int], ...]

KNIGHT_OFFSETS: Offsets = ((1, 2), (2, 1), (2, -1), (1, -2), (-1, -2), (-2, -1), (-2, 1), (-1, 2))
KING_OFFSETS: Offsets = ((-1, -1), (0, -1), (1, -1), (-1, 0), (1, 0), (-1, 1), (0, 1), (1, 1))
DIAGONALS: Offsets = ((1, 1), (1, -1), (-1, 1), (-1, -1))
ORTHOGONALS: Offsets = ((1, 0), (-1, 0), (0, 1), (0, -1))
ALL_DIRECTIONS: Offsets = DIAGONALS + ORTHOGONALS


def in_bounds(f: int, r: int) -> bool:
    return 0 <= f < 8 and 0 <= r < 8


def is_square_attacked(squares: Sequence[Optional[int]], sq: int, by_color: str) -> bool:
    """Return True if any piece of ``by_color`` could capture on ``sq``.

    Move legality is not consulted: a pinned piece still attacks.

    Args:
        squares: 64-entry board, ``None`` for empty squares.
        sq: Target square index.
        by_color: Attacking side, ``"w"`` or ``"b"``.
    """
    f = sq % 8
    r = sq // 8

    # Pawns attack one rank toward the defender, so look one rank back
    pawn = make_piece(by_color, PAWN)
    pr = r - 1 if by_color == WHITE else r + 1
    for df in (-1, 1):
        if in_bounds(f + df, pr) and squares[pr * 8 + f + df] == pawn:
            return True

    knight = make_piece(by_color, KNIGHT)
    for df, dr in KNIGHT_OFFSETS:
        tf, tr = f + df, r + dr
        if in_bounds(tf, tr) and squares[tr * 8 + tf] == knight:
            return True

    queen = make_piece(by_color, QUEEN)
    if _ray_hits(squares, f, r, DIAGONALS, make_piece(by_color, BISHOP), queen):
        return True
    if _ray_hits(squares, f, r, ORTHOGONALS, make_piece(by_color, ROOK), queen):
        return True

    king = make_piece(by_color, KING)
    for df, dr in KING_OFFSETS:
        tf, tr = f + df, r + dr
        if in_bounds(tf, tr) and squares[tr * 8 + tf] == king:
            return True

    return False


def _ray_hits(
    squares: Sequence[Optional[int]], f: int, r: int, directions: Offsets, slider: int, queen: int
) -> bool:
    for df, dr in directions:
        tf, tr = f + df, r + dr
        while in_bounds(tf, tr):
            occupant = squares[tr * 8 + tf]
            if occupant is not None:
                if occupant == slider or occupant == queen:
                    return True
                break
            tf += df
            tr += dr
    return False

