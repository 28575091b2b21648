import pytest

from match3.components.board import EMPTY, Board

from tests.helpers import SWAP_FIXTURE, make_harness


def test_new_board_is_empty():
    board = Board(rows=2, cols=3)
    assert board.snapshot() == [[0, 0, 0], [0, 0, 0]]
    assert all(board.is_empty(pos) for pos in board.positions())


def test_positions_are_row_major():
    board = Board(rows=2, cols=2)
    assert list(board.positions()) == [(0, 0), (0, 1), (1, 0), (1, 1)]


def test_bounds():
    board = Board(rows=5, cols=5)
    assert board.in_bounds((0, 0))
    assert board.in_bounds((4, 4))
    assert not board.in_bounds((5, 0))
    assert not board.in_bounds((0, -1))


def test_accessors_and_clear():
    board = Board.from_rows([[1, 2], [3, 4]])
    assert board.value_at((1, 0)) == 3
    board.set_value((1, 0), 5)
    assert board.value_at((1, 0)) == 5
    board.clear_cell((0, 1))
    assert board.is_empty((0, 1))
    assert board.value_at((0, 1)) == EMPTY


def test_snapshot_and_copy_are_independent():
    board = Board.from_rows([[1, 2], [3, 4]])
    snap = board.snapshot()
    clone = board.copy()
    board.set_value((0, 0), 5)
    assert snap[0][0] == 1
    assert clone.value_at((0, 0)) == 1
    assert clone.kinds == board.kinds


@pytest.mark.parametrize(
    "layout",
    [
        [[1, 2], [3]],
        [[1, 2]],
        [[1, 9], [2, 3]],
        [[1, -1], [2, 3]],
        [[1, "a"], [2, 3]],
    ],
)
def test_load_rejects_malformed_layouts(layout):
    board = Board(rows=2, cols=2)
    with pytest.raises(ValueError):
        board.load(layout)
    assert board.snapshot() == [[0, 0], [0, 0]]


def test_from_rows_rejects_empty_layout():
    with pytest.raises(ValueError):
        Board.from_rows([])


@pytest.mark.parametrize(
    "layout",
    [
        [[1, 2, 3, 4, 5], [2, 3, 4, 5, 1], [3, 4, 0, 1, 2], [4, 5, 1, 2, 3], [1, 1, 2, 1, 4]],
        [[1, 2, 3, 4, 5], [2, 3, 4, 5, 1], [3, 4, 5, 1, 2], [4, 5, 1, 2, 3], [1, 1, 1, 2, 4]],
    ],
    ids=["empty-cell", "existing-run"],
)
def test_board_system_only_installs_settled_layouts(layout):
    harness = make_harness(SWAP_FIXTURE)
    with pytest.raises(ValueError):
        harness.board_system.load(layout)
    assert harness.board.snapshot() == SWAP_FIXTURE
