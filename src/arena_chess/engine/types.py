from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


BOARD_SIZE = 8


class Side(str, Enum):
    """One of the two players. Values match the wire tags used by clients."""

    LIGHT = "w"
    DARK = "b"

    @property
    def opponent(self) -> "Side":
        return Side.DARK if self is Side.LIGHT else Side.LIGHT

    @property
    def forward(self) -> int:
        """Rank delta of a single pawn step."""
        return 1 if self is Side.LIGHT else -1

    @property
    def pawn_rank(self) -> int:
        return 1 if self is Side.LIGHT else 6

    @property
    def last_rank(self) -> int:
        return 7 if self is Side.LIGHT else 0


class PieceKind(str, Enum):
    PAWN = "pawn"
    ROOK = "rook"
    KNIGHT = "knight"
    BISHOP = "bishop"
    QUEEN = "queen"
    KING = "king"


PROMOTION_KINDS = frozenset({PieceKind.QUEEN, PieceKind.ROOK, PieceKind.BISHOP, PieceKind.KNIGHT})


@dataclass(frozen=True)
class Position:
    """Board coordinate.

    Attributes:
        file (int): Column index, 0 for the a-file.
        rank (int): Row index, 0 for the light side's back rank.
    """

    file: int
    rank: int

    def in_bounds(self) -> bool:
        return 0 <= self.file < BOARD_SIZE and 0 <= self.rank < BOARD_SIZE

    def offset(self, df: int, dr: int) -> "Position":
        return Position(self.file + df, self.rank + dr)


def all_positions() -> list[Position]:
    return [Position(f, r) for r in range(BOARD_SIZE) for f in range(BOARD_SIZE)]


def parse_side(value: Union[Side, str]) -> Optional[Side]:
    """Coerce ``value`` into a :class:`Side`, or ``None`` if unrecognised."""
    try:
        return Side(value)
    except ValueError:
        return None


def parse_promotion(value: Union[PieceKind, str]) -> Optional[PieceKind]:
    """Coerce ``value`` into a promotion kind.

    Returns:
        Optional[PieceKind]: The kind, or ``None`` when ``value`` is not one
        of queen, rook, bishop or knight.
    """
    try:
        kind = PieceKind(value)
    except ValueError:
        return None
    return kind if kind in PROMOTION_KINDS else None
