from __future__ import annotations

import argparse
import logging
from typing import List, Optional

import uvicorn

from ..config import get_settings
from ..engine.board import STARTPOS_FEN
from ..engine.game import Game


def _serve(args: argparse.Namespace) -> int:
    settings = get_settings()
    uvicorn.run(
        "minimax_chess.protocol.http.app:create_app",
        factory=True,
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


def _search(args: argparse.Namespace) -> int:
    try:
        game = Game.from_fen(args.fen)
    except ValueError as e:
        args.error(f"invalid FEN: {e}")
    if not game.board.has_both_kings():
        args.error("invalid FEN: each side needs exactly one king")
    res = game.search(args.depth, enable_pruning=not args.no_pruning)
    best = res.best_move.to_uci() if res.best_move else "(none)"
    score = f"mate {res.mate}" if res.mate is not None else f"cp {res.score}"
    print(
        f"bestmove {best} score {score} nodes {res.nodes} depth {res.depth} time_ms {res.time_ms}"
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="minimax-chess", description="Minimax chess engine")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", type=str, default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.set_defaults(func=_serve)

    s = sub.add_parser("search", help="Search a position and print the best move")
    s.add_argument("--fen", type=str, default=STARTPOS_FEN, help="FEN string (default: startpos)")
    s.add_argument("--depth", type=int, default=3, help="Search depth in plies (default: 3)")
    s.add_argument("--no-pruning", action="store_true", help="Disable alpha-beta cutoffs")
    s.set_defaults(func=_search, error=s.error)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command != "serve":
        logging.basicConfig(level=get_settings().log_level)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
