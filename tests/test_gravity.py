from blockslide.board import Board, CellState


def test_piece_stops_on_occupied_row():
    board = Board(8, 10)
    wide = board.place_piece(0, 2, 3)
    narrow = board.place_piece(2, 2, 2)

    drops = board.resolve_drops()

    assert drops == {narrow: 1}
    assert narrow.row == 1
    assert wide.row == 0
    assert board.get_cell(2, 2) is CellState.EMPTY
    assert board.get_cell(1, 3) is CellState.OCCUPIED


def test_resolve_drops_is_idempotent():
    board = Board(8, 10)
    board.place_piece(5, 0, 4)
    board.place_piece(3, 2, 2)
    board.place_piece(7, 6, 3)

    assert board.resolve_drops()
    assert board.resolve_drops() == {}


def test_bottom_up_order_lets_stacked_pieces_fall_together():
    board = Board(8, 10)
    lower = board.place_piece(3, 0, 2)
    upper = board.place_piece(4, 0, 2)

    drops = board.resolve_drops()

    assert drops == {lower: 0, upper: 1}
    assert board.resolve_drops() == {}


def test_piece_does_not_jump_over_occupied_row():
    board = Board(8, 10)
    board.place_piece(0, 0, 1)
    shelf = board.place_piece(1, 0, 4)  # supported at column 0
    perched = board.place_piece(2, 2, 1)  # row 0 below it is empty

    assert board.resolve_drops() == {}
    assert shelf.row == 1
    assert perched.row == 2
    assert board.get_cell(0, 2) is CellState.EMPTY


def test_mixed_drops_respect_vacated_space():
    board = Board(8, 10)
    board.place_piece(0, 0, 4)
    board.place_piece(1, 3, 1)
    ledge = board.place_piece(2, 3, 2)  # held up by the single cell
    faller = board.place_piece(3, 0, 1)
    top = board.place_piece(4, 0, 4)

    drops = board.resolve_drops()

    assert ledge not in drops
    assert drops[faller] == 1
    # The 4-wide piece follows into row 3 and then rests on the ledge.
    assert drops[top] == 3
    board.check_consistency()


def test_find_drops_previews_without_moving():
    board = Board(8, 10)
    board.place_piece(0, 0, 2)
    floating = board.place_piece(5, 0, 1)

    preview = board.find_drops()

    assert preview == {floating: 1}
    assert floating.row == 5


def test_pieces_on_bottom_row_never_move():
    board = Board(8, 10)
    piece = board.place_piece(0, 7, 3)
    assert board.resolve_drops() == {}
    assert piece.row == 0
