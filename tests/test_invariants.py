import random

import pytest

from blockslide.events import DeltaKind
from blockslide.game_state import GameSession


def _assert_consistent(session):
    board = session.board
    board.check_consistency()
    owners = {}
    for piece in board.all_pieces():
        for cell in piece.footprint():
            assert cell not in owners, "pieces overlap"
            owners[cell] = piece.id
    occupied = {(r, c) for r in range(board.rows) for c in range(board.columns) if board.grid[r, c]}
    assert occupied == set(owners)


@pytest.mark.parametrize("seed", [0, 1, 2, 3, 4])
def test_random_play_keeps_board_consistent(seed):
    rng = random.Random(seed)
    session = GameSession(8, 10, seed=seed)
    session.reset()
    _assert_consistent(session)

    for _ in range(30):
        pieces = session.all_pieces()
        if not pieces:
            session.settle_request()
            continue
        piece = rng.choice(pieces)
        session.move_request(piece.id, rng.randrange(-2, 12))
        _assert_consistent(session)
        report = session.settle_request()
        assert report is not None
        _assert_consistent(session)

        # The loop only returns once the board is quiet.
        assert session.board.find_drops() == {}
        assert session.board.full_rows() == []
        assert not session.is_settling()


@pytest.mark.parametrize("seed", [5, 6])
def test_stepped_settle_matches_deltas(seed):
    session = GameSession(8, 10, seed=seed)
    session.reset()
    seen = 0
    for delta in session.settle_steps():
        seen += 1
        assert session.is_settling()
        assert not delta.is_empty
        _assert_consistent(session)
    assert seen >= 1
    kinds = [d.kind for d in session.drain_deltas()]
    assert kinds.count(DeltaKind.INJECT) == 1
