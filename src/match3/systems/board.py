import logging
import random
from typing import Sequence

from esper import World
from match3.components.board import EMPTY, Board
from match3.constants import GRID_COLS, GRID_ROWS, MAX_INITIAL_MATCH_PASSES, MAX_LAYOUT_ATTEMPTS, TILE_KINDS
from match3.events.bus import EventBus, EVENT_BOARD_ANOMALY
from match3.systems.board_ops import eliminate_initial_matches, find_matches, has_any_legal_move, randomize

logger = logging.getLogger(__name__)


class BoardSystem:
    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        rows: int = GRID_ROWS,
        cols: int = GRID_COLS,
        *,
        kinds: int = TILE_KINDS,
        rng: random.Random | None = None,
        max_initial_passes: int = MAX_INITIAL_MATCH_PASSES,
        max_layout_attempts: int = MAX_LAYOUT_ATTEMPTS,
    ):
        self.world = world
        self.event_bus = event_bus
        self._rng = rng or getattr(world, "random", None) or random.Random()
        self.max_initial_passes = max_initial_passes
        self.max_layout_attempts = max(1, max_layout_attempts)
        # Create a single board entity with Board component
        self.board_entity = self.world.create_entity(Board(rows=rows, cols=cols, kinds=kinds))
        self.reset_board()

    @property
    def board(self) -> Board:
        return self.world.component_for_entity(self.board_entity, Board)

    def reset_board(self) -> Board:
        """Fill the board with a fresh match-free layout that offers at least one move.

        A layout whose correction passes ran out is kept as it is; the residual
        match is reported and later resolved by the cascade.
        """
        board = self.board
        for attempt in range(1, self.max_layout_attempts + 1):
            randomize(board, self._rng)
            if not eliminate_initial_matches(board, self._rng, max_passes=self.max_initial_passes):
                residual = sorted(find_matches(board))
                logger.warning(
                    "Initial board still has %d matching tiles after %d passes",
                    len(residual), self.max_initial_passes,
                )
                self.event_bus.emit(EVENT_BOARD_ANOMALY, reason="initial_matches", positions=residual)
                return board
            if has_any_legal_move(board):
                logger.debug("Board ready after %d layout attempt(s)", attempt)
                return board
        logger.warning("No layout with a legal move found in %d attempts", self.max_layout_attempts)
        self.event_bus.emit(EVENT_BOARD_ANOMALY, reason="no_legal_moves", positions=[])
        return board

    def load(self, rows_data: Sequence[Sequence[int]]) -> Board:
        """Replace the board with a fixed settled layout (puzzles, tests).

        The layout must be full and free of runs; the board is left untouched otherwise.
        """
        candidate = self.board.copy()
        candidate.load(rows_data)
        if any(candidate.value_at(pos) == EMPTY for pos in candidate.positions()):
            raise ValueError("Layout has empty cells")
        if find_matches(candidate):
            raise ValueError("Layout already contains a run")
        board = self.board
        board.load(rows_data)
        return board
