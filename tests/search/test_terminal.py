from __future__ import annotations

import pytest

from minimax_chess.engine.game import Game
from minimax_chess.engine.move import parse_uci
from minimax_chess.search.service import MATE_SCORE, SearchService


@pytest.mark.parametrize("depth", [1, 2, 3])
def test_stalemate_root_returns_draw_and_no_move(depth: int) -> None:
    # White king a1 has no moves and is not attacked
    game = Game.from_fen("8/8/8/8/8/1q6/2k5/K7 w - - 0 1")
    res = SearchService().search(game, depth=depth)
    assert game.stalemate() is True
    assert res.best_move is None
    assert res.score == 0
    assert res.score_cp == 0
    assert res.mate is None


def test_checkmate_root_reports_mate() -> None:
    # Black to move is checkmated (in check, no legal moves)
    fen = "7k/6Q1/6K1/8/8/8/8/8 b - - 0 1"
    game = Game.from_fen(fen)
    res = SearchService().search(game, depth=2)
    assert game.checkmate() is True
    assert res.best_move is None
    assert res.score == MATE_SCORE
    # Positive mate means White delivered it
    assert res.mate == 1
    assert res.score_cp is None


def test_black_finds_mate_in_one() -> None:
    game = Game.new()
    for uci in ("f2f3", "e7e5", "g2g4"):
        game.apply_move(parse_uci(uci))
    res = SearchService().search(game, depth=2)
    assert res.best_move is not None
    assert res.best_move.to_uci() == "d8h4"
    assert res.score == -MATE_SCORE
    assert res.mate == -1


@pytest.mark.parametrize("depth", [2, 3])
def test_white_finds_back_rank_mate(depth: int) -> None:
    game = Game.from_fen("6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1")
    res = SearchService().search(game, depth=depth)
    assert res.best_move is not None
    assert res.best_move.to_uci() == "a1a8"
    assert res.mate == 1


def test_depth_one_does_not_see_mate() -> None:
    # At depth 1 the mating move is only scored by material
    game = Game.from_fen("6k1/5ppp/8/8/8/8/8/R5K1 w - - 0 1")
    res = SearchService().search(game, depth=1)
    assert res.mate is None
    assert res.score == game.evaluate()
