from __future__ import annotations

from typing import Callable, Dict, List, Optional

from .board import Board
from .move import Move, Patch
from .types import PieceKind, Position, Side, all_positions


Validator = Callable[[Board, Position, Position, Side], bool]


def _sign(v: int) -> int:
    return (v > 0) - (v < 0)


def _open_or_enemy(board: Board, pos: Position, side: Side) -> bool:
    target = board.piece_at(pos)
    return target is None or target.side is not side


def _path_clear(board: Board, origin: Position, target: Position) -> bool:
    """Return True if every square strictly between origin and target is empty."""
    df = _sign(target.file - origin.file)
    dr = _sign(target.rank - origin.rank)
    pos = origin.offset(df, dr)
    while pos != target:
        if board.piece_at(pos) is not None:
            return False
        pos = pos.offset(df, dr)
    return True


def _en_passant_victim(board: Board, origin: Position, target: Position, side: Side):
    # The victim sits beside the origin, on the target file.
    beside = board.piece_at(Position(target.file, origin.rank))
    if (
        beside is not None
        and beside.kind is PieceKind.PAWN
        and beside.side is not side
        and beside.en_passant
    ):
        return beside
    return None


# --- Per-kind validators (geometry and occupancy only) ---
def is_valid_pawn_move(board: Board, origin: Position, target: Position, side: Side) -> bool:
    df = target.file - origin.file
    dr = target.rank - origin.rank
    step = side.forward

    if df == 0 and dr == step:
        return board.piece_at(target) is None

    if df == 0 and dr == 2 * step and origin.rank == side.pawn_rank:
        return board.piece_at(target) is None and board.piece_at(origin.offset(0, step)) is None

    if abs(df) == 1 and dr == step:
        occupant = board.piece_at(target)
        if occupant is not None:
            return occupant.side is not side
        return _en_passant_victim(board, origin, target, side) is not None

    return False


def is_valid_rook_move(board: Board, origin: Position, target: Position, side: Side) -> bool:
    if origin == target or (origin.file != target.file and origin.rank != target.rank):
        return False
    return _path_clear(board, origin, target) and _open_or_enemy(board, target, side)


def is_valid_bishop_move(board: Board, origin: Position, target: Position, side: Side) -> bool:
    df = abs(target.file - origin.file)
    dr = abs(target.rank - origin.rank)
    if df == 0 or df != dr:
        return False
    return _path_clear(board, origin, target) and _open_or_enemy(board, target, side)


def is_valid_queen_move(board: Board, origin: Position, target: Position, side: Side) -> bool:
    return is_valid_rook_move(board, origin, target, side) or is_valid_bishop_move(
        board, origin, target, side
    )


def is_valid_knight_move(board: Board, origin: Position, target: Position, side: Side) -> bool:
    deltas = {abs(target.file - origin.file), abs(target.rank - origin.rank)}
    if deltas != {1, 2}:
        return False
    return _open_or_enemy(board, target, side)


def is_valid_king_move(board: Board, origin: Position, target: Position, side: Side) -> bool:
    # Single-square steps only; castling is not supported.
    df = abs(target.file - origin.file)
    dr = abs(target.rank - origin.rank)
    if df > 1 or dr > 1 or (df == 0 and dr == 0):
        return False
    return _open_or_enemy(board, target, side)


VALIDATORS: Dict[PieceKind, Validator] = {
    PieceKind.PAWN: is_valid_pawn_move,
    PieceKind.ROOK: is_valid_rook_move,
    PieceKind.BISHOP: is_valid_bishop_move,
    PieceKind.KNIGHT: is_valid_knight_move,
    PieceKind.QUEEN: is_valid_queen_move,
    PieceKind.KING: is_valid_king_move,
}


def is_valid_move(board: Board, origin: Position, target: Position, side: Side) -> bool:
    """Return True if the move is geometrically legal for the piece at ``origin``.

    Does not consider whether the move leaves the mover's own king in check;
    see :func:`is_legal_move` for that.
    """
    if not target.in_bounds():
        return False
    piece = board.piece_at(origin)
    if piece is None or piece.side is not side:
        return False
    return VALIDATORS[piece.kind](board, origin, target, side)


# --- Check detection ---
def is_in_check(board: Board, side: Side) -> bool:
    """Return True if any opposing piece attacks the king of ``side``."""
    king = board.king(side)
    if king is None:
        return False
    attacker = side.opponent
    for p in board.pieces(attacker):
        if is_valid_move(board, p.position, king.position, attacker):
            return True
    return False


# --- Move planning and legality ---
def plan_move(
    board: Board, origin: Position, target: Position, promotion: Optional[PieceKind] = None
) -> Patch:
    """Resolve a geometrically valid move into a :class:`Patch`.

    ``promotion`` is only carried onto the patch when the mover is a pawn
    landing on its last rank.

    Raises:
        ValueError: If there is no piece on ``origin``.
    """
    piece = board.piece_at(origin)
    if piece is None:
        raise ValueError(f"no piece on {origin}")

    captured = board.piece_at(target)
    en_passant = False
    double_step = False
    promo: Optional[PieceKind] = None
    if piece.kind is PieceKind.PAWN:
        dr = target.rank - origin.rank
        if captured is None and abs(target.file - origin.file) == 1 and dr == piece.side.forward:
            victim = _en_passant_victim(board, origin, target, piece.side)
            if victim is not None:
                captured = victim
                en_passant = True
        double_step = abs(dr) == 2
        if target.rank == piece.side.last_rank:
            promo = promotion

    if captured is not None and captured.side is piece.side:
        captured = None
    return Patch(
        piece_id=piece.id,
        origin=origin,
        target=target,
        captured_id=captured.id if captured is not None else None,
        en_passant=en_passant,
        double_step=double_step,
        promotion=promo,
    )


def is_legal_move(board: Board, origin: Position, target: Position, side: Side) -> bool:
    """Return True if the move is valid and does not leave ``side`` in check."""
    if not is_valid_move(board, origin, target, side):
        return False
    return not is_in_check(board.apply(plan_move(board, origin, target)), side)


def legal_moves(board: Board, side: Side) -> List[Move]:
    """Enumerate every legal move of ``side`` by trying all 64 destinations per piece."""
    moves: List[Move] = []
    squares = all_positions()
    for p in board.pieces(side):
        for target in squares:
            if is_legal_move(board, p.position, target, side):
                moves.append(Move(p.position, target))
    return moves


def has_legal_moves(board: Board, side: Side) -> bool:
    """Return True as soon as one legal move of ``side`` is found."""
    squares = all_positions()
    for p in board.pieces(side):
        for target in squares:
            if is_legal_move(board, p.position, target, side):
                return True
    return False


def is_checkmated(board: Board, side: Side) -> bool:
    return is_in_check(board, side) and not has_legal_moves(board, side)
