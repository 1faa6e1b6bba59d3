from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .types import PieceKind, Position


@dataclass(frozen=True)
class Move:
    """A candidate move as submitted by a player.

    Attributes:
        origin (Position): Square the piece starts on.
        target (Position): Destination square.
        promotion (Optional[PieceKind]): Kind chosen for a pawn reaching its
            last rank, if supplied up front.
    """

    origin: Position
    target: Position
    promotion: Optional[PieceKind] = None


@dataclass(frozen=True)
class Patch:
    """Fully resolved board change for one move.

    A patch carries everything needed to produce the next board without
    consulting the current one again: which piece moves, which piece (if
    any) is captured, and whether the move sets up en passant.

    Attributes:
        piece_id (int): Id of the moving piece.
        origin (Position): Square the piece leaves.
        target (Position): Square the piece lands on.
        captured_id (Optional[int]): Id of the removed enemy piece.
        en_passant (bool): The capture removes a pawn beside the origin
            rather than on ``target``.
        double_step (bool): A pawn advanced two ranks.
        promotion (Optional[PieceKind]): Kind the piece becomes on landing.
    """

    piece_id: int
    origin: Position
    target: Position
    captured_id: Optional[int] = None
    en_passant: bool = False
    double_step: bool = False
    promotion: Optional[PieceKind] = None
