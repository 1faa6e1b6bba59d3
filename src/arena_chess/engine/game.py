from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union

from . import rules
from .board import Board, Piece
from .move import Move
from .types import PieceKind, Position, Side, parse_promotion, parse_side


logger = logging.getLogger(__name__)


class Rejection(str, Enum):
    """Why the last move or promotion request was refused."""

    OUT_OF_TURN = "out_of_turn"
    ILLEGAL_GEOMETRY = "illegal_geometry"
    SELF_CHECK = "self_check"
    INVALID_PROMOTION = "invalid_promotion"


@dataclass(frozen=True)
class PendingPromotion:
    position: Position
    side: Side


@dataclass(frozen=True)
class GameState:
    """Read-only snapshot of a game.

    Attributes:
        pieces (Tuple[Piece, ...]): Live pieces ordered by id.
        turn_count (int): Completed turns.
        side_to_move (Side): Side whose move is expected.
        winner (Optional[Side]): Side that delivered checkmate, if any.
        pending_promotion (Optional[PendingPromotion]): Pawn awaiting a
            promotion choice; the turn has not advanced yet.
        in_check (bool): ``side_to_move`` is in check.
    """

    pieces: Tuple[Piece, ...]
    turn_count: int
    side_to_move: Side
    winner: Optional[Side]
    pending_promotion: Optional[PendingPromotion]
    in_check: bool


class ChessGame:
    """Two-player chess game driven by an external session layer.

    Responsibility: accept or reject moves and promotion choices, advance
    turns and detect checkmate. Ordinary rejections return ``False`` and are
    recorded on :attr:`last_rejection`; nothing is raised for them.

    Every public call holds a per-instance lock, so concurrent submissions
    from both players are processed one at a time.
    """

    def __init__(
        self,
        board: Optional[Board] = None,
        side_to_move: Side = Side.LIGHT,
        turn_count: int = 0,
    ) -> None:
        self._lock = threading.RLock()
        if board is None:
            board = Board.startpos()
        _validate_board(board, side_to_move)
        self._board = board
        self._side_to_move = side_to_move
        self._turn_count = turn_count
        self._winner: Optional[Side] = None
        self._pending: Optional[PendingPromotion] = None
        self._last_rejection: Optional[Rejection] = None

    @classmethod
    def from_placement(cls, placement: str, side_to_move: Union[Side, str] = Side.LIGHT) -> "ChessGame":
        """Create a game from a placement string (see :meth:`Board.from_placement`).

        Raises:
            ValueError: If the placement is malformed, either side does not
                have exactly one king, or the side not to move is in check.
        """
        side = parse_side(side_to_move)
        if side is None:
            raise ValueError(f"side to move must be 'w' or 'b': {side_to_move!r}")
        return cls(board=Board.from_placement(placement), side_to_move=side)

    # --- Read side ---
    @property
    def board(self) -> Board:
        return self._board

    @property
    def last_rejection(self) -> Optional[Rejection]:
        return self._last_rejection

    def get_state(self) -> GameState:
        with self._lock:
            return GameState(
                pieces=tuple(self._board.pieces()),
                turn_count=self._turn_count,
                side_to_move=self._side_to_move,
                winner=self._winner,
                pending_promotion=self._pending,
                in_check=rules.is_in_check(self._board, self._side_to_move),
            )

    def in_check(self) -> bool:
        with self._lock:
            return rules.is_in_check(self._board, self._side_to_move)

    def legal_moves(self) -> List[Move]:
        """Legal moves for the side to move; empty while play is suspended."""
        with self._lock:
            if self._winner is not None or self._pending is not None:
                return []
            return rules.legal_moves(self._board, self._side_to_move)

    def reset(self) -> None:
        with self._lock:
            self._board = Board.startpos()
            self._side_to_move = Side.LIGHT
            self._turn_count = 0
            self._winner = None
            self._pending = None
            self._last_rejection = None

    # --- Transactions ---
    def make_move(
        self,
        origin: Position,
        target: Position,
        side: Union[Side, str],
        promotion: Optional[Union[PieceKind, str]] = None,
    ) -> bool:
        """Attempt a move for ``side``.

        Args:
            origin (Position): Square of the piece to move.
            target (Position): Destination square.
            side (Union[Side, str]): Side submitting the move.
            promotion (Optional[Union[PieceKind, str]]): Kind for a pawn
                reaching its last rank. When omitted on such a move the
                promotion is left pending and the turn does not advance
                until :meth:`promote_pawn` succeeds.

        Returns:
            bool: ``True`` if the move was committed.
        """
        with self._lock:
            reason = self._apply_move(origin, target, side, promotion)
            return self._settle("move", reason)

    def promote_pawn(
        self, position: Position, kind: Union[PieceKind, str], side: Union[Side, str]
    ) -> bool:
        """Complete a pending promotion and the turn it froze."""
        with self._lock:
            reason = self._apply_promotion(position, kind, side)
            return self._settle("promotion", reason)

    # --- Internals ---
    def _settle(self, action: str, reason: Optional[Rejection]) -> bool:
        self._last_rejection = reason
        if reason is not None:
            logger.debug("%s rejected: %s", action, reason.value)
            return False
        return True

    def _apply_move(
        self,
        origin: Position,
        target: Position,
        side: Union[Side, str],
        promotion: Optional[Union[PieceKind, str]],
    ) -> Optional[Rejection]:
        mover = parse_side(side)
        if (
            mover is None
            or self._winner is not None
            or self._pending is not None
            or mover is not self._side_to_move
        ):
            return Rejection.OUT_OF_TURN

        promo: Optional[PieceKind] = None
        if promotion is not None:
            promo = parse_promotion(promotion)
            if promo is None:
                return Rejection.INVALID_PROMOTION

        if not rules.is_valid_move(self._board, origin, target, mover):
            return Rejection.ILLEGAL_GEOMETRY

        patch = rules.plan_move(self._board, origin, target, promo)
        candidate = self._board.apply(patch)
        if rules.is_in_check(candidate, mover):
            return Rejection.SELF_CHECK

        self._board = candidate
        moved = candidate.get(patch.piece_id)
        if moved.kind is PieceKind.PAWN and target.rank == mover.last_rank:
            self._pending = PendingPromotion(target, mover)
            logger.info("promotion pending", extra={"side": mover.value})
            return None

        self._finish_turn(mover)
        return None

    def _apply_promotion(
        self, position: Position, kind: Union[PieceKind, str], side: Union[Side, str]
    ) -> Optional[Rejection]:
        mover = parse_side(side)
        promo = parse_promotion(kind)
        if self._pending is None or mover is None or promo is None:
            return Rejection.INVALID_PROMOTION
        if self._pending != PendingPromotion(position, mover):
            return Rejection.INVALID_PROMOTION
        pawn = self._board.piece_at(position)
        if pawn is None or pawn.kind is not PieceKind.PAWN or pawn.side is not mover:
            return Rejection.INVALID_PROMOTION

        self._board = self._board.promote(pawn.id, promo)
        self._pending = None
        logger.info("pawn promoted", extra={"side": mover.value, "kind": promo.value})
        self._finish_turn(mover)
        return None

    def _finish_turn(self, mover: Side) -> None:
        self._turn_count += 1
        self._side_to_move = mover.opponent
        if rules.is_checkmated(self._board, self._side_to_move):
            self._winner = mover
            logger.info("checkmate", extra={"winner": mover.value, "turn": self._turn_count})


def _validate_board(board: Board, side_to_move: Side) -> None:
    for side in Side:
        kings = [p for p in board.pieces(side) if p.kind is PieceKind.KING]
        if len(kings) != 1:
            raise ValueError(f"side {side.value!r} must have exactly one king")
    if rules.is_in_check(board, side_to_move.opponent):
        raise ValueError("side not to move is in check")
