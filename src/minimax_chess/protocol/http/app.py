from __future__ import annotations

import logging
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...config import Settings, get_settings
from ...engine.board import STARTPOS_FEN
from ...engine.errors import IllegalMoveError, InvariantViolation
from ...engine.game import Game
from ...engine.move import parse_uci
from ...engine.perft import perft as perft_nodes
from ...engine.pieces import PIECE_TO_CHAR
from ...search.service import SearchResult
from .error import (
    exception_handler,
    http_exception_handler,
    illegal_move_handler,
    invariant_violation_handler,
    request_validation_exception_handler,
)
from .logging_middleware import RequestContextMiddleware
from .session import InMemorySessionStore


logger = logging.getLogger(__name__)


class CreateGameRequest(BaseModel):
    fen: Optional[str] = Field(
        default=None, description="Start from this FEN instead of the initial position"
    )


class CreateGameResponse(BaseModel):
    game_id: str
    fen: str


class SetPositionRequest(BaseModel):
    fen: str = Field(..., description="FEN string")


class MoveRequest(BaseModel):
    move: str = Field(..., description="Coordinate move string, e.g., e2e4 or e7e8q")


class UndoRequest(BaseModel):
    plies: int = Field(default=1, ge=1, le=2, description="Plies to take back (2 returns the turn)")


class SearchRequest(BaseModel):
    depth: Optional[int] = Field(default=None, ge=1)


class PerftRequest(BaseModel):
    fen: str = Field(default=STARTPOS_FEN)
    depth: int = Field(default=1, ge=0)


class GameState(BaseModel):
    game_id: str
    fen: str
    side_to_move: str
    board: list[Optional[str]]
    legal_moves: list[str]
    in_check: bool
    checkmate: bool
    stalemate: bool
    status: str
    evaluation: int
    last_move: Optional[str]
    move_history: list[str]


class SearchResponse(BaseModel):
    best_move: Optional[str]
    score: Dict[str, int]
    nodes: int
    depth: int
    time_ms: int


class EngineMoveResponse(BaseModel):
    search: SearchResponse
    state: GameState


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Minimax Chess API", version="0.1.0")

    logging.basicConfig(level=settings.log_level)

    app.add_middleware(RequestContextMiddleware)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(IllegalMoveError, illegal_move_handler)
    app.add_exception_handler(InvariantViolation, invariant_violation_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore(max_sessions=settings.max_sessions)
    app.state.store = store
    app.state.settings = settings

    def resolve_depth(requested: Optional[int]) -> int:
        depth = requested or settings.default_depth
        if depth > settings.max_depth:
            raise HTTPException(status_code=400, detail=f"depth must be <= {settings.max_depth}")
        return depth

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/games", response_model=CreateGameResponse)
    def create_game(req: Optional[CreateGameRequest] = None) -> CreateGameResponse:
        if req is not None and req.fen is not None:
            game = _load_fen(req.fen)
        else:
            game = Game.new()
        game_id = store.create(game)
        logger.info("game created", extra={"game_id": game_id})
        return CreateGameResponse(game_id=game_id, fen=game.to_fen())

    @app.get("/api/games/{game_id}/state", response_model=GameState)
    def get_state(game_id: str) -> GameState:
        game = _require_game(store, game_id)
        with game.lock:
            return _game_state(game_id, game)

    @app.delete("/api/games/{game_id}")
    def delete_game(game_id: str) -> Dict[str, str]:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        return {"status": "deleted"}

    @app.post("/api/games/{game_id}/reset", response_model=GameState)
    def reset(game_id: str) -> GameState:
        game = _require_game(store, game_id)
        with game.lock:
            game.reset()
            return _game_state(game_id, game)

    @app.post("/api/games/{game_id}/position", response_model=GameState)
    def set_position(game_id: str, req: SetPositionRequest) -> GameState:
        game = _require_game(store, game_id)
        loaded = _load_fen(req.fen)
        # Swap the position in place so requests holding this game see it
        with game.lock:
            game.board = loaded.board
            return _game_state(game_id, game)

    @app.post("/api/games/{game_id}/move", response_model=GameState)
    def make_move(game_id: str, req: MoveRequest) -> GameState:
        game = _require_game(store, game_id)
        try:
            move = parse_uci(req.move)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        with game.lock:
            game.apply_move(move)
            return _game_state(game_id, game)

    @app.post("/api/games/{game_id}/undo", response_model=GameState)
    def undo(game_id: str, req: Optional[UndoRequest] = None) -> GameState:
        game = _require_game(store, game_id)
        plies = req.plies if req is not None else 1
        with game.lock:
            if not game.board.history:
                raise HTTPException(status_code=400, detail="no moves to undo")
            for _ in range(min(plies, len(game.board.history))):
                game.undo_move()
            return _game_state(game_id, game)

    @app.post("/api/games/{game_id}/search", response_model=SearchResponse)
    def search(game_id: str, req: Optional[SearchRequest] = None) -> SearchResponse:
        game = _require_game(store, game_id)
        depth = resolve_depth(req.depth if req is not None else None)
        with game.lock:
            res = game.search(depth)
        return _search_response(res)

    @app.post("/api/games/{game_id}/engine-move", response_model=EngineMoveResponse)
    def engine_move(game_id: str, req: Optional[SearchRequest] = None) -> EngineMoveResponse:
        game = _require_game(store, game_id)
        depth = resolve_depth(req.depth if req is not None else None)
        with game.lock:
            res = game.engine_move(depth)
            state = _game_state(game_id, game)
        return EngineMoveResponse(search=_search_response(res), state=state)

    @app.post("/api/perft")
    def perft(req: PerftRequest) -> Dict[str, int]:
        if req.depth > settings.max_perft_depth:
            raise HTTPException(
                status_code=400, detail=f"depth must be <= {settings.max_perft_depth}"
            )
        game = _load_fen(req.fen)
        return {"nodes": perft_nodes(game.board, req.depth)}

    return app


def _require_game(store: InMemorySessionStore, game_id: str) -> Game:
    game = store.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game


def _load_fen(fen: str) -> Game:
    try:
        game = Game.from_fen(fen)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"invalid FEN: {e}")
    # Sessions need both kings for status reporting
    if not game.board.has_both_kings():
        raise HTTPException(status_code=400, detail="invalid FEN: each side needs exactly one king")
    return game


def _game_state(game_id: str, game: Game) -> GameState:
    board = game.board
    history = game.move_history_uci()
    status = game.status()
    return GameState(
        game_id=game_id,
        fen=game.to_fen(),
        side_to_move=board.side_to_move,
        board=[PIECE_TO_CHAR[p] if p is not None else None for p in board.squares],
        legal_moves=[m.to_uci() for m in game.legal_moves()],
        in_check=status in ("check", "checkmate"),
        checkmate=status == "checkmate",
        stalemate=status == "stalemate",
        status=status,
        evaluation=game.evaluate(),
        last_move=history[-1] if history else None,
        move_history=history,
    )


def _search_response(res: SearchResult) -> SearchResponse:
    # Score object: either cp or mate (sign gives the mating side, + for White)
    score = {"mate": res.mate} if res.mate is not None else {"cp": res.score}
    return SearchResponse(
        best_move=res.best_move.to_uci() if res.best_move else None,
        score=score,
        nodes=res.nodes,
        depth=res.depth,
        time_ms=res.time_ms,
    )
