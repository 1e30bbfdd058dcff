from __future__ import annotations

import pytest

from minimax_chess.engine.board import STARTPOS_FEN, Board, CastlingRights
from minimax_chess.engine.pieces import BK, WK, WR


def test_startpos_round_trip() -> None:
    b = Board.from_fen(STARTPOS_FEN)
    assert b.to_fen() == STARTPOS_FEN


def test_startpos_layout_uses_a1_as_square_zero() -> None:
    b = Board.startpos()
    assert b.squares[0] == WR
    assert b.squares[4] == WK
    assert b.squares[60] == BK
    assert b.side_to_move == "w"
    assert b.castling == CastlingRights()
    assert b.ep_square is None


@pytest.mark.parametrize(
    "fen",
    [
        # Mixed pieces and empty squares, some castling rights
        "r1bqkbnr/pppp1ppp/2n5/4p3/3P4/5N2/PPP1PPPP/RNBQKB1R b KQ - 2 3",
        # No castling rights, ep target present on rank 3 or 6
        "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b - e3 0 1",
        # All castling rights
        "r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1",
        # Partial rights on one side only
        "r3k2r/8/8/8/8/8/8/R3K2R b Kq - 5 40",
    ],
)
def test_round_trip_various_positions(fen: str) -> None:
    b = Board.from_fen(fen)
    assert b.to_fen() == fen


@pytest.mark.parametrize(
    "fen",
    [
        "",  # empty
        "8/8/8/8/8/8/8 w - - 0 1",  # not enough ranks
        "8/8/8/8/8/8/8/8 w - - 0",  # missing fields
        "8/8/8/8/8/8/8/8 x - - 0 1",  # bad side to move
        "8/8/8/8/8/8/8/8 w A - 0 1",  # bad castling
        "8/8/8/8/8/8/8/8 w KK - 0 1",  # repeated castling letter
        "8/8/8/8/8/8/8/8 w - z9 0 1",  # bad ep square
        "8/8/8/8/8/8/8/8 w - e4 0 1",  # ep square on the wrong rank
        "8/8/8/8/8/8/8/8 w - - -1 1",  # bad halfmove
        "8/8/8/8/8/8/8/8 w - - 0 0",  # bad fullmove
        "9/8/8/8/8/8/8/8 w - - 0 1",  # too many squares
        "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNX w KQkq - 0 1",  # bad piece
        "4k3/8/8/8/8/8/8/K3K3 w - - 0 1",  # two white kings
    ],
)
def test_invalid_fen_raises(fen: str) -> None:
    with pytest.raises(ValueError):
        Board.from_fen(fen)


def test_copy_is_independent() -> None:
    b = Board.startpos()
    c = b.copy()
    c.squares[0] = None
    assert b.squares[0] == WR
    assert b != c


def test_piece_at_reads_squares() -> None:
    b = Board.startpos()
    assert b.piece_at(4) == WK
    assert b.piece_at(28) is None
