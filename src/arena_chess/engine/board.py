from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Iterator, List, Optional

from .move import Patch
from .types import BOARD_SIZE, PieceKind, Position, Side


STARTING_PLACEMENT = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"

KIND_TO_CHAR = {
    PieceKind.PAWN: "p",
    PieceKind.KNIGHT: "n",
    PieceKind.BISHOP: "b",
    PieceKind.ROOK: "r",
    PieceKind.QUEEN: "q",
    PieceKind.KING: "k",
}
CHAR_TO_KIND = {v: k for k, v in KIND_TO_CHAR.items()}


@dataclass(frozen=True)
class Piece:
    """A live piece on the board.

    Attributes:
        id (int): Stable identifier, unique within a board.
        kind (PieceKind): Piece type.
        side (Side): Owning side.
        position (Position): Current square.
        has_moved (bool): The piece has moved at least once.
        en_passant (bool): Pawn that just advanced two ranks and may be
            captured en passant on the next move.
    """

    id: int
    kind: PieceKind
    side: Side
    position: Position
    has_moved: bool = False
    en_passant: bool = False

    @property
    def symbol(self) -> str:
        ch = KIND_TO_CHAR[self.kind]
        return ch.upper() if self.side is Side.LIGHT else ch


class Board:
    """Immutable piece store keyed by piece id.

    Notes:
    - Boards are never mutated after construction; :meth:`apply` returns a
      new board, so a discarded candidate needs no rollback.
    - A position index gives O(1) occupancy lookups.
    """

    def __init__(self, pieces: Iterable[Piece]) -> None:
        self._pieces: Dict[int, Piece] = {}
        self._by_position: Dict[Position, int] = {}
        for p in pieces:
            if p.id in self._pieces:
                raise ValueError(f"duplicate piece id: {p.id}")
            if not p.position.in_bounds():
                raise ValueError(f"piece {p.id} is off the board: {p.position}")
            if p.position in self._by_position:
                raise ValueError(f"square occupied twice: {p.position}")
            self._pieces[p.id] = p
            self._by_position[p.position] = p.id

    @classmethod
    def startpos(cls) -> "Board":
        """Create a board holding the standard starting position."""
        return cls.from_placement(STARTING_PLACEMENT)

    @classmethod
    def from_placement(cls, placement: str) -> "Board":
        """Create a board from the piece-placement field of a FEN string.

        Args:
            placement (str): Ranks from 8 down to 1 separated by ``/``; upper
                case for the light side, digits for runs of empty squares.

        Returns:
            Board: Board with ids assigned in a1..h8 scan order.

        Raises:
            ValueError: If ``placement`` is empty, does not describe eight
                ranks of eight squares, or contains an unknown piece letter.
        """
        if not placement or not isinstance(placement, str):
            raise ValueError("placement must be a non-empty string")
        ranks = placement.strip().split("/")
        if len(ranks) != BOARD_SIZE:
            raise ValueError("placement must have 8 ranks")
        pieces: List[Piece] = []
        for rank_idx, rank in enumerate(ranks[::-1]):  # start from rank 1 (bottom)
            file_idx = 0
            for ch in rank:
                if ch.isdigit():
                    n = int(ch)
                    if n < 1 or n > BOARD_SIZE:
                        raise ValueError("invalid empty count in placement rank")
                    file_idx += n
                    continue
                kind = CHAR_TO_KIND.get(ch.lower())
                if kind is None:
                    raise ValueError(f"invalid piece in placement: {ch!r}")
                if file_idx >= BOARD_SIZE:
                    raise ValueError("too many squares in placement rank")
                side = Side.LIGHT if ch.isupper() else Side.DARK
                pieces.append(Piece(len(pieces), kind, side, Position(file_idx, rank_idx)))
                file_idx += 1
            if file_idx != BOARD_SIZE:
                raise ValueError("rank does not sum to 8 squares in placement")
        return cls(pieces)

    def to_placement(self) -> str:
        """Serialize the board into a placement string (see :meth:`from_placement`)."""
        rows: List[str] = []
        for rank_idx in range(BOARD_SIZE - 1, -1, -1):
            run = 0
            row = []
            for file_idx in range(BOARD_SIZE):
                p = self.piece_at(Position(file_idx, rank_idx))
                if p is None:
                    run += 1
                    continue
                if run > 0:
                    row.append(str(run))
                    run = 0
                row.append(p.symbol)
            if run > 0:
                row.append(str(run))
            rows.append("".join(row))
        return "/".join(rows)

    # --- Lookups ---
    def piece_at(self, pos: Position) -> Optional[Piece]:
        pid = self._by_position.get(pos)
        return None if pid is None else self._pieces[pid]

    def get(self, piece_id: int) -> Piece:
        return self._pieces[piece_id]

    def pieces(self, side: Optional[Side] = None) -> List[Piece]:
        """Return live pieces ordered by id, optionally only those of ``side``."""
        return [p for _, p in sorted(self._pieces.items()) if side is None or p.side is side]

    def king(self, side: Side) -> Optional[Piece]:
        for p in self._pieces.values():
            if p.kind is PieceKind.KING and p.side is side:
                return p
        return None

    def __iter__(self) -> Iterator[Piece]:
        return iter(self.pieces())

    def __len__(self) -> int:
        return len(self._pieces)

    # --- Transitions ---
    def apply(self, patch: Patch) -> "Board":
        """Return the board that results from ``patch``.

        The mover lands on ``patch.target`` (promoted if requested), the
        captured piece is dropped, and en passant eligibility is cleared on
        every pawn except a mover that just advanced two ranks.
        """
        pieces: List[Piece] = []
        for pid, p in self._pieces.items():
            if pid == patch.captured_id:
                continue
            if pid == patch.piece_id:
                p = replace(
                    p,
                    kind=patch.promotion or p.kind,
                    position=patch.target,
                    has_moved=True,
                    en_passant=patch.double_step,
                )
            elif p.en_passant:
                p = replace(p, en_passant=False)
            pieces.append(p)
        return Board(pieces)

    def promote(self, piece_id: int, kind: PieceKind) -> "Board":
        """Return a board where piece ``piece_id`` has become ``kind``."""
        target = self._pieces[piece_id]
        return Board(
            replace(p, kind=kind) if p is target else p for p in self._pieces.values()
        )
