#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import json
import os
import platform
import sys
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

# Ensure src/ is importable when running directly
SRC_PATH = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src")
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

from minimax_chess import __version__
from minimax_chess.engine.game import Game
from minimax_chess.search.service import SearchResult, SearchService


@dataclass
class BenchItem:
    id: str
    name: str
    fen: str
    depth: Optional[int] = None


DEFAULT_ITEMS: List[BenchItem] = [
    BenchItem("start", "Initial position", "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"),
    BenchItem(
        "kiwipete",
        "Kiwipete",
        "r3k2r/p1ppqpb1/bn2pnp1/3PN3/1p2P3/2N2Q1p/PPPBBPPP/R3K2R w KQkq - 0 1",
        depth=2,
    ),
    BenchItem("endgame", "Rook endgame", "8/2p5/3p4/KP5r/1R3p1k/8/4P1P1/8 w - - 0 1"),
    BenchItem(
        "italian",
        "Italian opening",
        "r1bqk1nr/pppp1ppp/2n5/2b1p3/2B1P3/5N2/PPPP1PPP/RNBQK2R w KQkq - 4 4",
    ),
]


def load_positions(path: str) -> List[BenchItem]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    items: List[BenchItem] = []
    for obj in data.get("positions", []):
        items.append(
            BenchItem(
                id=str(obj.get("id", obj.get("name", "pos"))),
                name=str(obj.get("name", "Unnamed")),
                fen=str(obj["fen"]),
                depth=(int(obj["depth"]) if obj.get("depth") is not None else None),
            )
        )
    return items


def bench_position(
    svc: SearchService, item: BenchItem, *, depth: int, iterations: int, enable_pruning: bool
) -> Dict[str, Any]:
    eff_depth = item.depth if item.depth is not None else depth
    try:
        game = Game.from_fen(item.fen)
    except ValueError as e:
        raise ValueError(f"Invalid FEN for {item.id}: {e}") from e

    total_time = 0
    last: Optional[SearchResult] = None
    for _ in range(max(1, iterations)):
        res = svc.search(game, depth=eff_depth, enable_pruning=enable_pruning)
        total_time += max(0, res.time_ms)
        last = res
    assert last is not None

    avg_time = int(total_time / max(1, iterations))
    nps = int(last.nodes * 1000 / max(1, avg_time)) if avg_time > 0 else 0
    score = {"mate": last.mate} if last.mate is not None else {"cp": last.score}
    return {
        "id": item.id,
        "name": item.name,
        "fen": item.fen,
        "depth": last.depth,
        "pruning": enable_pruning,
        "best_move": last.best_move.to_uci() if last.best_move else None,
        "score": score,
        "time_ms": avg_time,
        "nodes": last.nodes,
        "nps": nps,
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Time the search over a positions suite")
    parser.add_argument("--positions", default=None, help="Path to positions.json (default: built-in)")
    parser.add_argument("--depth", type=int, default=3, help="Depth for items without their own")
    parser.add_argument("--iterations", type=int, default=1, help="Repeat runs and average time")
    parser.add_argument(
        "--compare", action="store_true", help="Also run with pruning disabled for comparison"
    )
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON output")
    args = parser.parse_args()

    items = load_positions(args.positions) if args.positions else DEFAULT_ITEMS
    if not items:
        raise SystemExit("No positions found in positions file")

    svc = SearchService()
    modes = (True, False) if args.compare else (True,)
    results: List[Dict[str, Any]] = []
    t0 = time.perf_counter()
    for idx, it in enumerate(items, start=1):
        for pruning in modes:
            res = bench_position(
                svc, it, depth=args.depth, iterations=args.iterations, enable_pruning=pruning
            )
            results.append(res)
            sys.stderr.write(
                f"[{idx}/{len(items)}] {it.id} pruning={pruning} depth={res['depth']} "
                f"time={res['time_ms']}ms nodes={res['nodes']} best={res['best_move']}\n"
            )
    dt_ms = int((time.perf_counter() - t0) * 1000)

    payload = {
        "meta": {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "python": sys.version.split()[0],
            "platform": platform.platform(),
            "engine": {"version": __version__},
        },
        "results": results,
        "summary": {
            "positions": len(items),
            "total_time_ms": dt_ms,
            "total_nodes": sum(r["nodes"] for r in results),
        },
    }
    print(json.dumps(payload, indent=2 if args.pretty else None))


if __name__ == "__main__":
    main()
