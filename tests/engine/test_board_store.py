from __future__ import annotations

import pytest

from arena_chess.engine.board import STARTING_PLACEMENT, Board, Piece
from arena_chess.engine.move import Patch
from arena_chess.engine.types import PieceKind, Position, Side


def test_startpos_round_trip() -> None:
    b = Board.startpos()
    assert b.to_placement() == STARTING_PLACEMENT
    assert len(b) == 32
    assert len(b.pieces(Side.LIGHT)) == 16
    assert len(b.pieces(Side.DARK)) == 16


def test_startpos_layout(sq) -> None:
    b = Board.startpos()
    king = b.piece_at(sq("e1"))
    assert king is not None and king.kind is PieceKind.KING and king.side is Side.LIGHT
    queen = b.piece_at(sq("d8"))
    assert queen is not None and queen.kind is PieceKind.QUEEN and queen.side is Side.DARK
    assert b.piece_at(sq("e4")) is None
    assert all(not p.has_moved and not p.en_passant for p in b)


def test_ids_are_unique_and_stable() -> None:
    b = Board.startpos()
    ids = [p.id for p in b.pieces()]
    assert ids == sorted(set(ids))
    again = Board.startpos()
    assert [p.id for p in again.pieces()] == ids


def test_king_lookup(sq) -> None:
    b = Board.from_placement("4k3/8/8/8/8/8/8/4K3")
    assert b.king(Side.LIGHT).position == sq("e1")
    assert b.king(Side.DARK).position == sq("e8")


@pytest.mark.parametrize(
    "placement",
    [
        "",
        "8/8/8/8/8/8/8",
        "9/8/8/8/8/8/8/8",
        "4k3/8/8/8/8/8/8/4K2",
        "4k3/8/8/8/8/8/8/4K4",
        "4x3/8/8/8/8/8/8/4K3",
    ],
)
def test_invalid_placement_raises(placement: str) -> None:
    with pytest.raises(ValueError):
        Board.from_placement(placement)


def test_duplicate_square_rejected() -> None:
    pieces = [
        Piece(0, PieceKind.KING, Side.LIGHT, Position(4, 0)),
        Piece(1, PieceKind.ROOK, Side.LIGHT, Position(4, 0)),
    ]
    with pytest.raises(ValueError):
        Board(pieces)


def test_off_board_piece_rejected() -> None:
    with pytest.raises(ValueError):
        Board([Piece(0, PieceKind.KING, Side.LIGHT, Position(8, 0))])


def test_apply_returns_new_board_and_leaves_original(sq) -> None:
    b = Board.startpos()
    pawn = b.piece_at(sq("e2"))
    after = b.apply(Patch(pawn.id, sq("e2"), sq("e4"), double_step=True))

    assert b.piece_at(sq("e2")) == pawn
    assert b.piece_at(sq("e4")) is None

    moved = after.piece_at(sq("e4"))
    assert moved is not None and moved.id == pawn.id
    assert moved.has_moved and moved.en_passant
    assert after.piece_at(sq("e2")) is None


def test_apply_removes_captured_piece(sq) -> None:
    b = Board.from_placement("4k3/8/8/3r4/8/8/8/3RK3")
    rook = b.piece_at(sq("d1"))
    victim = b.piece_at(sq("d5"))
    after = b.apply(Patch(rook.id, sq("d1"), sq("d5"), captured_id=victim.id))
    assert len(after) == len(b) - 1
    assert after.piece_at(sq("d5")).id == rook.id
    with pytest.raises(KeyError):
        after.get(victim.id)


def test_apply_clears_en_passant_on_other_pawns(sq) -> None:
    b = Board(
        [
            Piece(0, PieceKind.KING, Side.LIGHT, sq("e1")),
            Piece(1, PieceKind.KING, Side.DARK, sq("e8")),
            Piece(2, PieceKind.PAWN, Side.DARK, sq("d5"), has_moved=True, en_passant=True),
            Piece(3, PieceKind.PAWN, Side.LIGHT, sq("a2")),
        ]
    )
    after = b.apply(Patch(3, sq("a2"), sq("a3")))
    assert not after.get(2).en_passant
    assert not after.get(3).en_passant


def test_promote_changes_kind_only(sq) -> None:
    b = Board.from_placement("4P2k/8/8/8/8/8/8/4K3")
    pawn = b.piece_at(sq("e8"))
    after = b.promote(pawn.id, PieceKind.QUEEN)
    promoted = after.piece_at(sq("e8"))
    assert promoted.kind is PieceKind.QUEEN
    assert promoted.id == pawn.id and promoted.side is Side.LIGHT
    assert b.piece_at(sq("e8")).kind is PieceKind.PAWN
