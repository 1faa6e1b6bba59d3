from __future__ import annotations

import pytest

from arena_chess.engine.game import ChessGame, PendingPromotion, Rejection
from arena_chess.engine.types import PieceKind, Side


PROMO_FEN = "7k/4P3/8/8/8/8/8/K7"


def test_promotion_deferred_until_choice(sq) -> None:
    g = ChessGame.from_placement(PROMO_FEN)
    assert g.make_move(sq("e7"), sq("e8"), Side.LIGHT)
    s = g.get_state()
    assert s.pending_promotion == PendingPromotion(sq("e8"), Side.LIGHT)
    assert s.side_to_move is Side.LIGHT
    assert s.turn_count == 0
    assert g.board.piece_at(sq("e8")).kind is PieceKind.PAWN
    assert g.legal_moves() == []

    assert g.promote_pawn(sq("e8"), "rook", "w")
    s = g.get_state()
    assert s.pending_promotion is None
    assert s.side_to_move is Side.DARK
    assert s.turn_count == 1
    assert g.board.piece_at(sq("e8")).kind is PieceKind.ROOK


def test_no_other_move_while_promotion_pending(sq) -> None:
    g = ChessGame.from_placement(PROMO_FEN)
    assert g.make_move(sq("e7"), sq("e8"), Side.LIGHT)
    before = g.get_state()
    assert not g.make_move(sq("a1"), sq("a2"), Side.LIGHT)
    assert g.last_rejection is Rejection.OUT_OF_TURN
    assert not g.make_move(sq("h8"), sq("g7"), Side.DARK)
    assert g.get_state() == before


def test_inline_promotion_completes_turn(sq) -> None:
    g = ChessGame.from_placement(PROMO_FEN)
    assert g.make_move(sq("e7"), sq("e8"), Side.LIGHT, PieceKind.KNIGHT)
    s = g.get_state()
    assert s.pending_promotion is None
    assert s.side_to_move is Side.DARK
    assert s.turn_count == 1
    assert g.board.piece_at(sq("e8")).kind is PieceKind.KNIGHT


def test_inline_promotion_string_kind(sq) -> None:
    g = ChessGame.from_placement(PROMO_FEN)
    assert g.make_move(sq("e7"), sq("e8"), "w", "queen")
    assert g.board.piece_at(sq("e8")).kind is PieceKind.QUEEN


@pytest.mark.parametrize("kind", ["king", "pawn", "dragon", ""])
def test_inline_promotion_unknown_kind_rejected(sq, kind: str) -> None:
    g = ChessGame.from_placement(PROMO_FEN)
    before = g.get_state()
    assert not g.make_move(sq("e7"), sq("e8"), Side.LIGHT, kind)
    assert g.last_rejection is Rejection.INVALID_PROMOTION
    assert g.get_state() == before


def test_promotion_kind_ignored_on_ordinary_move(sq) -> None:
    g = ChessGame()
    assert g.make_move(sq("e2"), sq("e4"), Side.LIGHT, PieceKind.QUEEN)
    assert g.board.piece_at(sq("e4")).kind is PieceKind.PAWN


def test_black_promotion_by_capture(sq) -> None:
    g = ChessGame.from_placement("k7/8/8/8/8/8/3p4/K3R3", side_to_move="b")
    assert g.make_move(sq("d2"), sq("e1"), Side.DARK)
    s = g.get_state()
    assert s.pending_promotion == PendingPromotion(sq("e1"), Side.DARK)
    assert len(s.pieces) == 3
    assert g.promote_pawn(sq("e1"), PieceKind.BISHOP, Side.DARK)
    assert g.get_state().side_to_move is Side.LIGHT


@pytest.mark.parametrize(
    "square,kind,side",
    [
        ("e7", "rook", "w"),  # wrong square
        ("e8", "rook", "b"),  # wrong side
        ("e8", "king", "w"),  # not a promotion kind
        ("e8", "pawn", "w"),
        ("e8", "wizard", "w"),
        ("e8", "rook", "x"),
    ],
)
def test_invalid_promotion_requests(sq, square: str, kind: str, side: str) -> None:
    g = ChessGame.from_placement(PROMO_FEN)
    assert g.make_move(sq("e7"), sq("e8"), Side.LIGHT)
    pending = g.get_state()
    assert not g.promote_pawn(sq(square), kind, side)
    assert g.last_rejection is Rejection.INVALID_PROMOTION
    assert g.get_state() == pending


def test_promotion_without_pending_rejected(sq) -> None:
    g = ChessGame()
    assert not g.promote_pawn(sq("e2"), "queen", "w")
    assert g.last_rejection is Rejection.INVALID_PROMOTION


def test_promotion_can_deliver_checkmate(sq) -> None:
    # Back-rank mate once the pawn becomes a queen or rook.
    g = ChessGame.from_placement("6k1/P4ppp/8/8/8/8/8/K7")
    assert g.make_move(sq("a7"), sq("a8"), Side.LIGHT)
    assert g.get_state().winner is None
    assert g.promote_pawn(sq("a8"), "queen", "w")
    assert g.get_state().winner is Side.LIGHT
