import pytest

from blockslide.piece import Piece, valid_width


def test_footprint_and_coverage():
    piece = Piece(id=1, row=2, col=3, width=3)
    assert piece.right == 5
    assert piece.footprint() == [(2, 3), (2, 4), (2, 5)]
    assert piece.covers(2, 3) and piece.covers(2, 5)
    assert not piece.covers(2, 6)
    assert not piece.covers(1, 4)


def test_width_and_id_are_fixed_but_position_moves():
    piece = Piece(id=7, row=0, col=0, width=2)
    piece.row = 4
    piece.col = 1
    assert piece.footprint() == [(4, 1), (4, 2)]
    with pytest.raises(AttributeError):
        piece.width = 3
    with pytest.raises(AttributeError):
        piece.id = 8


@pytest.mark.parametrize("width", [0, 5, -1])
def test_invalid_width_rejected(width):
    assert not valid_width(width)
    with pytest.raises(ValueError):
        Piece(id=1, row=0, col=0, width=width)


def test_pieces_compare_by_identity():
    a = Piece(id=1, row=0, col=0, width=1)
    b = Piece(id=1, row=0, col=0, width=1)
    assert a != b
    assert len({a, b}) == 2
