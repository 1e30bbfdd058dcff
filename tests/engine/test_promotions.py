from __future__ import annotations

from minimax_chess.engine.board import Board
from minimax_chess.engine.move import Move, str_to_square
from minimax_chess.engine.pieces import BP, BQ, WN, WP, WR


def _uci_set(moves):
    return set(m.to_uci() for m in moves)


def _from(b: Board, square: str) -> list[Move]:
    sq = str_to_square(square)
    return [m for m in b.generate_legal_moves() if m.from_sq == sq]


def test_white_pawn_push_promotions() -> None:
    fen = "k7/4P3/8/8/8/8/8/4K3 w - - 0 1"
    b = Board.from_fen(fen)
    ms = _from(b, "e7")
    assert len(ms) == 4
    assert _uci_set(ms) == {"e7e8q", "e7e8r", "e7e8b", "e7e8n"}


def test_blocked_pawn_has_no_promotions() -> None:
    b = Board.from_fen("k3r3/4P3/8/8/8/8/8/4K3 w - - 0 1")
    assert _from(b, "e7") == []


def test_white_pawn_capture_promotion() -> None:
    # King on e8 blocks the push, only captures remain
    fen = "3rk3/4P3/8/8/8/8/8/4K3 w - - 0 1"
    b = Board.from_fen(fen)
    assert _uci_set(_from(b, "e7")) == {"e7d8q", "e7d8r", "e7d8b", "e7d8n"}


def test_black_pawn_push_and_capture_promotions() -> None:
    fen = "4k3/8/8/8/8/8/3p4/2R3K1 b - - 0 1"
    b = Board.from_fen(fen)
    ms = _uci_set(_from(b, "d2"))
    assert ms == {
        "d2d1q", "d2d1r", "d2d1b", "d2d1n",
        "d2c1q", "d2c1r", "d2c1b", "d2c1n",
    }


def test_promotion_places_chosen_piece_and_undo_restores_pawn() -> None:
    b = Board.from_fen("k7/4P3/8/8/8/8/8/4K3 w - - 0 1")
    mv = next(m for m in _from(b, "e7") if m.promotion == "n")
    undo = b.make_move(mv)
    assert b.squares[str_to_square("e8")] == WN
    assert b.squares[str_to_square("e7")] is None
    assert b.halfmove_clock == 0

    b.undo_move(undo)
    assert b.squares[str_to_square("e7")] == WP
    assert b.squares[str_to_square("e8")] is None


def test_black_capture_promotion_undo_restores_captured_rook() -> None:
    b = Board.from_fen("4k3/8/8/8/8/8/3p4/2R3K1 b - - 0 1")
    mv = next(m for m in _from(b, "d2") if m.to_uci() == "d2c1q")
    undo = b.make_move(mv)
    assert b.squares[str_to_square("c1")] == BQ

    b.undo_move(undo)
    assert b.squares[str_to_square("c1")] == WR
    assert b.squares[str_to_square("d2")] == BP
