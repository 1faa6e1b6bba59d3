"""Chess rules engine for two-player game rooms."""

from .engine.board import Board, Piece
from .engine.game import ChessGame, GameState, PendingPromotion, Rejection
from .engine.move import Move
from .engine.types import PieceKind, Position, Side

__all__ = [
    "Board",
    "ChessGame",
    "GameState",
    "Move",
    "PendingPromotion",
    "Piece",
    "PieceKind",
    "Position",
    "Rejection",
    "Side",
]

__version__ = "0.1.0"
