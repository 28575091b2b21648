from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Set, Tuple

from esper import World

from match3.components.board import Board, Position
from match3.constants import MAX_INITIAL_MATCH_PASSES, MIN_RUN


@dataclass(frozen=True, slots=True)
class GravityMove:
    source: Position
    target: Position
    value: int


@dataclass(frozen=True, slots=True)
class TileSpawn:
    position: Position
    value: int


def get_board(world: World) -> Board:
    for _, board in world.get_component(Board):
        return board
    raise RuntimeError("Board component not found")


def is_adjacent(a: Position, b: Position) -> bool:
    ar, ac = a
    br, bc = b
    return abs(ar - br) + abs(ac - bc) == 1


def randomize(board: Board, rng: random.Random) -> None:
    """Fill every cell with a uniformly random kind; matches are left for the caller."""
    for pos in board.positions():
        board.set_value(pos, rng.randint(1, board.kinds))


def _run_length(board: Board, pos: Position, value: int, d_row: int, d_col: int) -> int:
    row, col = pos
    length = 0
    row += d_row
    col += d_col
    while board.in_bounds((row, col)) and board.value_at((row, col)) == value:
        length += 1
        row += d_row
        col += d_col
    return length


def match_at(board: Board, pos: Position) -> bool:
    """Return True if the horizontal or vertical run through pos reaches MIN_RUN."""
    if board.is_empty(pos):
        return False
    value = board.value_at(pos)
    horizontal = 1 + _run_length(board, pos, value, 0, -1) + _run_length(board, pos, value, 0, 1)
    if horizontal >= MIN_RUN:
        return True
    vertical = 1 + _run_length(board, pos, value, -1, 0) + _run_length(board, pos, value, 1, 0)
    return vertical >= MIN_RUN


def would_match(board: Board, pos: Position, value: int) -> bool:
    original = board.value_at(pos)
    board.set_value(pos, value)
    try:
        return match_at(board, pos)
    finally:
        board.set_value(pos, original)


def eliminate_initial_matches(
    board: Board,
    rng: random.Random,
    *,
    max_passes: int = MAX_INITIAL_MATCH_PASSES,
) -> bool:
    """Re-roll matching cells until a full pass is clean or ``max_passes`` run out.

    Returns False when the cap was reached and matches remain.
    """
    for _ in range(max_passes):
        found = False
        for pos in board.positions():
            if not match_at(board, pos):
                continue
            found = True
            current = board.value_at(pos)
            candidates = [
                kind for kind in range(1, board.kinds + 1)
                if kind != current and not would_match(board, pos, kind)
            ]
            if candidates:
                board.set_value(pos, rng.choice(candidates))
        if not found:
            return True
    return not find_matches(board)


def _lines(board: Board) -> Iterator[List[Position]]:
    for row in range(board.rows):
        yield [(row, col) for col in range(board.cols)]
    for col in range(board.cols):
        yield [(row, col) for row in range(board.rows)]


def find_matches(board: Board) -> Set[Position]:
    """Collect every position that belongs to a row or column run of MIN_RUN or more."""
    matches: Set[Position] = set()
    for line in _lines(board):
        start = 0
        while start < len(line):
            value = board.value_at(line[start])
            end = start + 1
            while end < len(line) and board.value_at(line[end]) == value:
                end += 1
            if not board.is_empty(line[start]) and end - start >= MIN_RUN:
                matches.update(line[start:end])
            start = end
    return matches


def swap_values(board: Board, a: Position, b: Position) -> None:
    value_a = board.value_at(a)
    board.set_value(a, board.value_at(b))
    board.set_value(b, value_a)


def clear_positions(board: Board, positions: Iterable[Position]) -> None:
    for pos in positions:
        board.clear_cell(pos)


def compact_columns(board: Board) -> List[GravityMove]:
    """Drop tiles to the bottom of each column, keeping their order.

    One move is returned per tile that changed row, column by column from the
    left and bottom-up within a column.
    """
    moves: List[GravityMove] = []
    for col in range(board.cols):
        write_row = board.rows - 1
        for row in range(board.rows - 1, -1, -1):
            source = (row, col)
            if board.is_empty(source):
                continue
            if row != write_row:
                target = (write_row, col)
                value = board.value_at(source)
                board.set_value(target, value)
                board.clear_cell(source)
                moves.append(GravityMove(source=source, target=target, value=value))
            write_row -= 1
    return moves


def refill_empties(board: Board, rng: random.Random) -> List[TileSpawn]:
    """Give every empty cell a random kind, column by column, top to bottom."""
    spawns: List[TileSpawn] = []
    for col in range(board.cols):
        for row in range(board.rows):
            pos = (row, col)
            if not board.is_empty(pos):
                continue
            value = rng.randint(1, board.kinds)
            board.set_value(pos, value)
            spawns.append(TileSpawn(position=pos, value=value))
    return spawns


def _iter_valid_swaps(board: Board) -> Iterator[Tuple[Position, Position]]:
    scratch = board.copy()
    for row, col in scratch.positions():
        pos = (row, col)
        for neighbor in ((row, col + 1), (row + 1, col)):
            if not scratch.in_bounds(neighbor):
                continue
            swap_values(scratch, pos, neighbor)
            creates_match = bool(find_matches(scratch))
            swap_values(scratch, pos, neighbor)
            if creates_match:
                yield pos, neighbor


def has_any_legal_move(board: Board) -> bool:
    """Deadlock test: True as soon as one adjacent swap would produce a match."""
    return next(_iter_valid_swaps(board), None) is not None


def find_valid_swaps(board: Board) -> List[Tuple[Position, Position]]:
    """Enumerate adjacent swaps that would produce a match."""
    return list(_iter_valid_swaps(board))
