from __future__ import annotations

import pytest

from minimax_chess.engine.board import Board
from minimax_chess.engine.move import Move
from minimax_chess.engine.pieces import BK, BR, WK, WR


def moves_set(b: Board) -> set[str]:
    return {m.to_uci() for m in b.generate_legal_moves()}


def _find(b: Board, uci: str) -> Move:
    return next(m for m in b.generate_legal_moves() if m.to_uci() == uci)


def test_white_castling_available_when_clear_and_not_in_check() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    ms = moves_set(b)
    assert "e1g1" in ms
    assert "e1c1" in ms
    assert _find(b, "e1g1").castle == "K"
    assert _find(b, "e1c1").castle == "Q"


def test_black_castling_available() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R b KQkq - 0 1")
    ms = moves_set(b)
    assert {"e8g8", "e8c8"}.issubset(ms)


@pytest.mark.parametrize(
    "fen, present, absent",
    [
        # No rights at all
        ("r3k2r/8/8/8/8/8/8/R3K2R w - - 0 1", set(), {"e1g1", "e1c1"}),
        # Bishop on f1 blocks the kingside
        ("r3k2r/8/8/8/8/8/8/R3KB1R w KQkq - 0 1", {"e1c1"}, {"e1g1"}),
        # Knight on b1 blocks the queenside
        ("r3k2r/8/8/8/8/8/8/RN2K2R w KQkq - 0 1", {"e1g1"}, {"e1c1"}),
        # Rook on f8 attacks the transit square f1
        ("r3kr2/8/8/8/8/8/8/R3K2R w KQq - 0 1", {"e1c1"}, {"e1g1"}),
        # Rook on g8 attacks the destination g1
        ("r3k1r1/8/8/8/8/8/8/R3K2R w KQq - 0 1", {"e1c1"}, {"e1g1"}),
        # King in check from e2
        ("4k3/8/8/8/8/8/4r3/R3K2R w KQ - 0 1", set(), {"e1g1", "e1c1"}),
        # b1 attacked does not matter, the king never crosses it
        ("1r2k3/8/8/8/8/8/8/R3K2R w KQ - 0 1", {"e1c1", "e1g1"}, set()),
        # Right still set but the h1 rook is gone
        ("4k3/8/8/8/8/8/8/R3K3 w KQ - 0 1", {"e1c1"}, {"e1g1"}),
    ],
)
def test_castling_gating(fen: str, present: set[str], absent: set[str]) -> None:
    ms = moves_set(Board.from_fen(fen))
    assert present <= ms
    assert not (absent & ms)


def test_castling_moves_rook_atomically() -> None:
    b = Board.from_fen("r3k2r/8/8/8/8/8/8/R3K2R w KQkq - 0 1")
    b.make_move(_find(b, "e1g1"))
    assert b.squares[6] == WK
    assert b.squares[5] == WR
    assert b.squares[7] is None
    assert b.squares[4] is None
    assert b.castling.to_fen() == "kq"

    b.make_move(_find(b, "e8c8"))
    assert b.squares[58] == BK
    assert b.squares[59] == BR
    assert b.squares[56] is None
    assert b.squares[60] is None
    assert b.castling.to_fen() == "-"
    assert b.to_fen() == "2kr3r/8/8/8/8/8/8/R4RK1 w - - 2 2"
