from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Sequence, Tuple

from match3.constants import TILE_KINDS

Position = Tuple[int, int]

# Reserved cell value; only ever present while a cascade is in progress.
EMPTY = 0


@dataclass(slots=True)
class Board:
    """Row-major grid of tile kinds. Row 0 is the top, row ``rows - 1`` the bottom.

    Callers go through the accessors rather than comparing against ``EMPTY``
    themselves.
    """

    rows: int
    cols: int
    kinds: int = TILE_KINDS
    cells: List[List[int]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.cells:
            self.cells = [[EMPTY] * self.cols for _ in range(self.rows)]

    @classmethod
    def from_rows(cls, rows_data: Sequence[Sequence[int]], *, kinds: int = TILE_KINDS) -> "Board":
        if not rows_data or not rows_data[0]:
            raise ValueError("Board layout must have at least one row and one column")
        board = cls(rows=len(rows_data), cols=len(rows_data[0]), kinds=kinds)
        board.load(rows_data)
        return board

    def in_bounds(self, pos: Position) -> bool:
        row, col = pos
        return 0 <= row < self.rows and 0 <= col < self.cols

    def value_at(self, pos: Position) -> int:
        row, col = pos
        return self.cells[row][col]

    def set_value(self, pos: Position, value: int) -> None:
        row, col = pos
        self.cells[row][col] = value

    def is_empty(self, pos: Position) -> bool:
        return self.value_at(pos) == EMPTY

    def clear_cell(self, pos: Position) -> None:
        self.set_value(pos, EMPTY)

    def positions(self) -> Iterator[Position]:
        for row in range(self.rows):
            for col in range(self.cols):
                yield (row, col)

    def snapshot(self) -> List[List[int]]:
        return [list(row) for row in self.cells]

    def copy(self) -> "Board":
        return Board(rows=self.rows, cols=self.cols, kinds=self.kinds, cells=self.snapshot())

    def load(self, rows_data: Sequence[Sequence[int]]) -> None:
        """Replace every cell with ``rows_data`` after checking shape and kinds."""
        if len(rows_data) != self.rows:
            raise ValueError(f"Expected {self.rows} rows, got {len(rows_data)}")
        for index, row in enumerate(rows_data):
            if len(row) != self.cols:
                raise ValueError(f"Row {index} has {len(row)} cells, expected {self.cols}")
            for value in row:
                if not isinstance(value, int) or not EMPTY <= value <= self.kinds:
                    raise ValueError(f"Cell value {value!r} outside 0..{self.kinds}")
        self.cells = [list(row) for row in rows_data]
