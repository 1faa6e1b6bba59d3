from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, Field

from .error import (
    exception_handler,
    http_exception_handler,
    rejection_error,
    request_validation_exception_handler,
)
from .logging_middleware import RequestIDLoggingMiddleware
from ... import __version__
from ...engine.board import Board, Piece
from ...engine.game import ChessGame
from ...engine.move import Move
from ...engine.types import Position, Side
from .session import InMemorySessionStore


logger = logging.getLogger(__name__)


class PositionModel(BaseModel):
    x: int = Field(..., ge=0, le=7, description="File index, 0 = a-file")
    y: int = Field(..., ge=0, le=7, description="Rank index, 0 = light back rank")

    @classmethod
    def of(cls, pos: Position) -> "PositionModel":
        return cls(x=pos.file, y=pos.rank)

    def to_position(self) -> Position:
        return Position(self.x, self.y)


class MoveRequest(BaseModel):
    origin: PositionModel = Field(..., alias="from")
    to: PositionModel
    side: Side
    promotion: Optional[str] = Field(default=None, description="queen, rook, bishop or knight")


class PromotionRequest(BaseModel):
    position: PositionModel
    promotion: str
    side: Side


class PieceModel(BaseModel):
    id: int
    type: str
    team: str
    position: PositionModel
    has_moved: bool
    en_passant: bool


class MoveModel(BaseModel):
    origin: PositionModel = Field(..., alias="from")
    to: PositionModel


class PendingPromotionModel(BaseModel):
    position: PositionModel
    team: str


class GameStateResponse(BaseModel):
    game_id: str
    placement: str
    pieces: List[PieceModel]
    turn_count: int
    side_to_move: str
    winner: Optional[str]
    pending_promotion: Optional[PendingPromotionModel]
    in_check: bool
    legal_moves: List[MoveModel]


class GameListResponse(BaseModel):
    games: List[str]


def create_app() -> FastAPI:
    app = FastAPI(title="Arena Chess API", version=__version__)

    logging.basicConfig(level=logging.INFO)

    app.add_middleware(RequestIDLoggingMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(Exception, exception_handler)

    store = InMemorySessionStore()
    app.state.store = store

    @app.get("/healthz")
    async def healthz() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/games", response_model=GameListResponse)
    async def list_games() -> GameListResponse:
        return GameListResponse(games=store.ids())

    @app.post("/api/games", response_model=GameStateResponse)
    async def create_game() -> GameStateResponse:
        game_id = store.create(ChessGame())
        logger.info("game created", extra={"game_id": game_id})
        return _state(game_id, _require_game(store, game_id))

    @app.get("/api/games/{game_id}/state", response_model=GameStateResponse)
    async def get_state(game_id: str) -> GameStateResponse:
        return _state(game_id, _require_game(store, game_id))

    @app.post("/api/games/{game_id}/move", response_model=GameStateResponse)
    async def make_move(game_id: str, req: MoveRequest) -> GameStateResponse:
        game = _require_game(store, game_id)
        ok = game.make_move(
            req.origin.to_position(), req.to.to_position(), req.side, req.promotion
        )
        if not ok:
            raise rejection_error("move", game.last_rejection)
        return _state(game_id, game)

    @app.post("/api/games/{game_id}/promote", response_model=GameStateResponse)
    async def promote(game_id: str, req: PromotionRequest) -> GameStateResponse:
        game = _require_game(store, game_id)
        if not game.promote_pawn(req.position.to_position(), req.promotion, req.side):
            raise rejection_error("promotion", game.last_rejection)
        return _state(game_id, game)

    @app.post("/api/games/{game_id}/reset", response_model=GameStateResponse)
    async def reset(game_id: str) -> GameStateResponse:
        game = _require_game(store, game_id)
        game.reset()
        return _state(game_id, game)

    @app.delete("/api/games/{game_id}")
    async def delete_game(game_id: str) -> Dict[str, str]:
        if not store.delete(game_id):
            raise HTTPException(status_code=404, detail="game not found")
        logger.info("game deleted", extra={"game_id": game_id})
        return {"status": "deleted"}

    return app


def _require_game(store: InMemorySessionStore, game_id: str) -> ChessGame:
    game = store.get(game_id)
    if game is None:
        raise HTTPException(status_code=404, detail="game not found")
    return game


def _piece(p: Piece) -> PieceModel:
    return PieceModel(
        id=p.id,
        type=p.kind.value,
        team=p.side.value,
        position=PositionModel.of(p.position),
        has_moved=p.has_moved,
        en_passant=p.en_passant,
    )


def _move(m: Move) -> MoveModel:
    return MoveModel(**{"from": PositionModel.of(m.origin), "to": PositionModel.of(m.target)})


def _state(game_id: str, game: ChessGame) -> GameStateResponse:
    state = game.get_state()
    pending = state.pending_promotion
    return GameStateResponse(
        game_id=game_id,
        placement=Board(state.pieces).to_placement(),
        pieces=[_piece(p) for p in state.pieces],
        turn_count=state.turn_count,
        side_to_move=state.side_to_move.value,
        winner=state.winner.value if state.winner is not None else None,
        pending_promotion=(
            PendingPromotionModel(position=PositionModel.of(pending.position), team=pending.side.value)
            if pending is not None
            else None
        ),
        in_check=state.in_check,
        legal_moves=[_move(m) for m in game.legal_moves()],
    )


# Default app for non-factory servers
app = create_app()
