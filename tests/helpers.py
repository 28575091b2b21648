from __future__ import annotations

import random
from dataclasses import dataclass, field
from itertools import product
from typing import Any, Sequence

from esper import World

from match3.components.board import Board
from match3.components.game_state import GameState
from match3.components.score import Score
from match3.constants import TILE_KINDS
from match3.events.bus import (
    EVENT_BOARD_ANOMALY,
    EVENT_GAME_INITIALIZED,
    EVENT_GAME_RESTARTED,
    TURN_EVENTS,
    EventBus,
)
from match3.systems.board import BoardSystem
from match3.systems.game_flow_system import GameFlowSystem
from match3.systems.match_resolution import MatchResolutionSystem
from match3.utils.game_state import get_game_state, get_score
from match3.world import create_world

# Settled 5x5 board: (4,2)<->(4,3) lines up 1,1,1 on the bottom row and nothing else.
SWAP_FIXTURE = [
    [1, 2, 3, 4, 5],
    [2, 3, 4, 5, 1],
    [3, 4, 5, 1, 2],
    [4, 5, 1, 2, 3],
    [1, 1, 2, 1, 4],
]

# (r + c) % 3 pattern over three kinds: no matches and no legal swap.
DEADLOCK = [[(r + c) % 3 + 1 for c in range(5)] for r in range(5)]


class ScriptedRandom:
    """Random source that hands out queued ``randint`` values before falling back to a seeded RNG."""

    def __init__(self, values: Sequence[int] = (), seed: int = 0):
        self._values = list(values)
        self._fallback = random.Random(seed)

    def randint(self, a: int, b: int) -> int:
        if self._values:
            value = self._values.pop(0)
            assert a <= value <= b, f"Scripted value {value} outside {a}..{b}"
            return value
        return self._fallback.randint(a, b)

    def choice(self, seq):
        return self._fallback.choice(seq)

    @property
    def remaining(self) -> int:
        return len(self._values)


@dataclass
class Harness:
    bus: EventBus
    world: World
    board_system: BoardSystem
    resolution: MatchResolutionSystem
    flow: GameFlowSystem
    events: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    @property
    def board(self) -> Board:
        return self.board_system.board

    @property
    def state(self) -> GameState:
        return get_game_state(self.world)

    @property
    def score(self) -> Score:
        return get_score(self.world)

    def names(self) -> list[str]:
        return [name for name, _ in self.events]

    def swap(self, src, dst):
        return self.resolution.request_swap(src, dst)


def record_events(bus: EventBus, names: Sequence[str]) -> list[tuple[str, dict[str, Any]]]:
    received: list[tuple[str, dict[str, Any]]] = []

    def recorder(name: str):
        def handler(sender, **payload):
            received.append((name, payload))
        return handler

    for name in names:
        bus.subscribe(name, recorder(name))
    return received


def make_harness(
    grid: Sequence[Sequence[int]] | None = None,
    *,
    rng=None,
    seed: int = 1234,
    kinds: int = TILE_KINDS,
) -> Harness:
    """Wire the core systems; the board comes from ``grid`` when given, else a seeded deal."""
    bus = EventBus()
    world = create_world(rng=random.Random(seed))
    rows = len(grid) if grid is not None else 5
    cols = len(grid[0]) if grid is not None else 5
    events = record_events(
        bus, list(TURN_EVENTS) + [EVENT_GAME_INITIALIZED, EVENT_GAME_RESTARTED, EVENT_BOARD_ANOMALY]
    )
    board_system = BoardSystem(world, bus, rows, cols, kinds=kinds)
    if grid is not None:
        board_system.load(grid)
    resolution = MatchResolutionSystem(world, bus, rng=rng)
    flow = GameFlowSystem(world, bus, board_system)
    return Harness(bus=bus, world=world, board_system=board_system, resolution=resolution, flow=flow, events=events)


def naive_has_run(grid: Sequence[Sequence[int]]) -> bool:
    """Independent three-in-a-row check used to cross-check the engine."""
    rows, cols = len(grid), len(grid[0])
    for r, c in product(range(rows), range(cols)):
        value = grid[r][c]
        if value == 0:
            continue
        if c + 2 < cols and grid[r][c + 1] == value and grid[r][c + 2] == value:
            return True
        if r + 2 < rows and grid[r + 1][c] == value and grid[r + 2][c] == value:
            return True
    return False


def brute_force_moves(grid: Sequence[Sequence[int]]) -> list[tuple[tuple[int, int], tuple[int, int]]]:
    rows, cols = len(grid), len(grid[0])
    moves = []
    for r, c in product(range(rows), range(cols)):
        for nr, nc in ((r, c + 1), (r + 1, c)):
            if nr >= rows or nc >= cols:
                continue
            trial = [list(row) for row in grid]
            trial[r][c], trial[nr][nc] = trial[nr][nc], trial[r][c]
            if naive_has_run(trial):
                moves.append(((r, c), (nr, nc)))
    return moves
