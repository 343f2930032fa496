from blockslide.__main__ import main, play_turn
from blockslide.board import Board
from blockslide.game_state import GameSession
from blockslide.utils import occupancy_ascii, render_ascii, render_grid


def test_main_prints_each_turn(capsys):
    main(["--seed", "3", "--turns", "2"])
    out = capsys.readouterr().out
    assert " 7 " in out
    assert "Turn 1" in out


def test_play_turn_moves_a_piece():
    session = GameSession(8, 10, seed=4)
    session.board.place_piece(0, 0, 2)
    summary = play_turn(session)
    assert summary is not None
    assert session.turns == 1


def test_play_turn_without_room_returns_none():
    session = GameSession(1, 4, seed=0)
    session.board.place_piece(0, 0, 4)
    assert play_turn(session) is None


def test_render_puts_bottom_row_last():
    board = Board(3, 5)
    board.place_piece(0, 0, 3)
    board.place_piece(2, 4, 1)

    assert render_grid(board) == [
        [0, 0, 0, 0, 1],
        [0, 0, 0, 0, 0],
        [3, 3, 3, 0, 0],
    ]
    assert render_ascii(board) == "....1\n.....\n333.."
    assert render_ascii(board, labels=True).splitlines()[0] == " 2 ....1"
    assert occupancy_ascii(board) == "....#\n.....\n###.."
