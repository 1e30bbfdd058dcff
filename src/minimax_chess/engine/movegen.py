"""Pseudo-legal move generation.

Moves produced here obey piece movement rules but may still leave the
mover's own king attacked; :meth:`Board.generate_legal_moves` filters them.
Squares are scanned a1..h8 and each piece's moves are emitted in a fixed
order, so the output is deterministic for a given position.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Tuple

from .attacks import (
    ALL_DIRECTIONS,
    DIAGONALS,
    KING_OFFSETS,
    KNIGHT_OFFSETS,
    ORTHOGONALS,
    in_bounds,
    is_square_attacked,
)
from .move import PROMOTION_PIECES, Move
from .pieces import (
    BISHOP,
    KING,
    KNIGHT,
    PAWN,
    QUEEN,
    ROOK,
    WHITE,
    make_piece,
    opposite,
    piece_color,
    piece_type,
)

if TYPE_CHECKING:
    from .board import Board


@dataclass(frozen=True)
class CastlePath:
    """Squares involved in one castling move."""

    king_from: int
    king_to: int
    rook_from: int
    rook_to: int
    # Squares between king and rook that must be empty
    between: Tuple[int, ...]
    # King's square, the square it crosses and its destination
    safe: Tuple[int, ...]


CASTLE_PATHS: Dict[str, CastlePath] = {
    "K": CastlePath(4, 6, 7, 5, between=(5, 6), safe=(4, 5, 6)),
    "Q": CastlePath(4, 2, 0, 3, between=(3, 2, 1), safe=(4, 3, 2)),
    "k": CastlePath(60, 62, 63, 61, between=(61, 62), safe=(60, 61, 62)),
    "q": CastlePath(60, 58, 56, 59, between=(59, 58, 57), safe=(60, 59, 58)),
}

# Rook home corner -> castling side it belongs to
ROOK_HOMES: Dict[int, str] = {path.rook_from: side for side, path in CASTLE_PATHS.items()}


def generate_moves(board: "Board", color: str) -> List[Move]:
    """Return all pseudo-legal moves for ``color`` in ``board``.

    ``color`` need not be the side to move; castling and en passant are still
    judged against the board's current rights and target.
    """
    moves: List[Move] = []
    squares = board.squares
    for sq in range(64):
        piece = squares[sq]
        if piece is None or piece_color(piece) != color:
            continue
        ptype = piece_type(piece)
        if ptype == PAWN:
            _pawn_moves(board, sq, color, moves)
        elif ptype == KNIGHT:
            _step_moves(squares, sq, color, KNIGHT_OFFSETS, moves)
        elif ptype == BISHOP:
            _slide_moves(squares, sq, color, DIAGONALS, moves)
        elif ptype == ROOK:
            _slide_moves(squares, sq, color, ORTHOGONALS, moves)
        elif ptype == QUEEN:
            _slide_moves(squares, sq, color, ALL_DIRECTIONS, moves)
        elif ptype == KING:
            _step_moves(squares, sq, color, KING_OFFSETS, moves)
            _castle_moves(board, sq, color, moves)
    return moves


def _pawn_moves(board: "Board", sq: int, color: str, moves: List[Move]) -> None:
    squares = board.squares
    f, r = sq % 8, sq // 8
    if color == WHITE:
        dr, home_rank, last_rank = 1, 1, 7
    else:
        dr, home_rank, last_rank = -1, 6, 0
    nr = r + dr
    if not 0 <= nr < 8:
        # A pawn on its last rank cannot exist in play; nothing to generate
        return

    one = nr * 8 + f
    if squares[one] is None:
        _add_pawn_move(sq, one, nr == last_rank, moves)
        if r == home_rank:
            two = (r + 2 * dr) * 8 + f
            if squares[two] is None:
                moves.append(Move(sq, two, is_double_push=True))

    for df in (-1, 1):
        nf = f + df
        if not 0 <= nf < 8:
            continue
        target_sq = nr * 8 + nf
        target = squares[target_sq]
        if target is not None and piece_color(target) != color:
            _add_pawn_move(sq, target_sq, nr == last_rank, moves)
        elif target is None and board.ep_square == target_sq and board.side_to_move == color:
            # The target is only valid for the side to move
            moves.append(Move(sq, target_sq, is_en_passant=True))


def _add_pawn_move(from_sq: int, to_sq: int, promotes: bool, moves: List[Move]) -> None:
    if promotes:
        for promo in PROMOTION_PIECES:
            moves.append(Move(from_sq, to_sq, promotion=promo))
    else:
        moves.append(Move(from_sq, to_sq))


def _step_moves(
    squares: Sequence[Optional[int]],
    sq: int,
    color: str,
    offsets: Sequence[Tuple[int, int]],
    moves: List[Move],
) -> None:
    f, r = sq % 8, sq // 8
    for df, dr in offsets:
        tf, tr = f + df, r + dr
        if not in_bounds(tf, tr):
            continue
        to_sq = tr * 8 + tf
        target = squares[to_sq]
        if target is None or piece_color(target) != color:
            moves.append(Move(sq, to_sq))


def _slide_moves(
    squares: Sequence[Optional[int]],
    sq: int,
    color: str,
    directions: Sequence[Tuple[int, int]],
    moves: List[Move],
) -> None:
    f, r = sq % 8, sq // 8
    for df, dr in directions:
        tf, tr = f + df, r + dr
        while in_bounds(tf, tr):
            to_sq = tr * 8 + tf
            target = squares[to_sq]
            if target is None:
                moves.append(Move(sq, to_sq))
            else:
                if piece_color(target) != color:
                    moves.append(Move(sq, to_sq))
                break
            tf += df
            tr += dr


def _castle_moves(board: "Board", sq: int, color: str, moves: List[Move]) -> None:
    squares = board.squares
    enemy = opposite(color)
    rook = make_piece(color, ROOK)
    sides = ("K", "Q") if color == WHITE else ("k", "q")
    for side in sides:
        path = CASTLE_PATHS[side]
        if sq != path.king_from or not board.castling.allows(side):
            continue
        if squares[path.rook_from] != rook:
            continue
        if any(squares[s] is not None for s in path.between):
            continue
        # Covers "not out of check" and "not through check" in one test
        if any(is_square_attacked(squares, s, enemy) for s in path.safe):
            continue
        moves.append(Move(path.king_from, path.king_to, castle=side))
