import logging
import random
from typing import Any, Optional, Set

from esper import World
from match3.components.board import Board, Position
from match3.components.game_state import TurnPhase
from match3.constants import PER_TILE_SCORE
from match3.events.bus import (EventBus, EVENT_TILE_SWAP_REQUEST, EVENT_TILE_SWAP_ACCEPTED,
                               EVENT_TILE_SWAP_REJECTED, EVENT_MATCHES_CLEARED, EVENT_TILES_FELL,
                               EVENT_TILES_SPAWNED, EVENT_GAME_OVER)
from match3.events.script import TurnScript
from match3.systems.board_ops import (clear_positions, compact_columns, find_matches, get_board,
                                      has_any_legal_move, is_adjacent, refill_empties, swap_values)
from match3.utils.game_state import get_game_state, get_score, set_turn_phase

logger = logging.getLogger(__name__)


class MatchResolutionSystem:
    """Runs a whole turn: swap validation, then clear/fall/refill until the board settles.

    The turn is computed up front into a TurnScript. The script is published on
    the bus once the board has settled; the phase only leaves SWAPPING or
    CASCADING after publication, so requests raised by subscribers are ignored.
    """

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        rng: random.Random | None = None,
        per_tile_score: int = PER_TILE_SCORE,
    ):
        self.world = world
        self.event_bus = event_bus
        self._rng = rng or getattr(world, "random", None) or random.Random()
        self.per_tile_score = per_tile_score
        self.event_bus.subscribe(EVENT_TILE_SWAP_REQUEST, self.on_swap_request)

    def on_swap_request(self, sender, **kwargs):
        self.request_swap(kwargs.get('src'), kwargs.get('dst'))

    def request_swap(self, src: Any, dst: Any) -> Optional[TurnScript]:
        """Play one turn; returns None when the request is ignored."""
        board = get_board(self.world)
        src = self._coerce_position(board, src)
        dst = self._coerce_position(board, dst)
        if src is None or dst is None or not is_adjacent(src, dst):
            logger.debug("Ignoring swap request %r -> %r", src, dst)
            return None
        state = get_game_state(self.world)
        if not state.accepts_swaps:
            logger.debug("Ignoring swap request while %s", state.phase.name)
            return None

        set_turn_phase(self.world, TurnPhase.SWAPPING)
        script = TurnScript()
        src_value = board.value_at(src)
        dst_value = board.value_at(dst)
        swap_values(board, src, dst)
        matches = find_matches(board)
        if not matches:
            swap_values(board, src, dst)
            script.record(EVENT_TILE_SWAP_REJECTED, src=src, dst=dst)
            outcome = TurnPhase.IDLE
        else:
            script.record(EVENT_TILE_SWAP_ACCEPTED, src=src, dst=dst, src_value=src_value, dst_value=dst_value)
            set_turn_phase(self.world, TurnPhase.CASCADING)
            outcome = self._resolve_cascade(board, matches, script)
        try:
            script.publish(self.event_bus)
        finally:
            set_turn_phase(self.world, outcome)
        logger.debug("Turn %s -> %s finished as %s (%d events)", src, dst, outcome.name, len(script))
        return script

    def _resolve_cascade(self, board: Board, matches: Set[Position], script: TurnScript) -> TurnPhase:
        score = get_score(self.world)
        depth = 0
        while matches:
            depth += 1
            cleared = sorted(matches)
            score.current += len(cleared) * self.per_tile_score
            script.record(EVENT_MATCHES_CLEARED, positions=cleared, count=len(cleared),
                          score=score.current, depth=depth)
            clear_positions(board, cleared)
            script.record(EVENT_TILES_FELL, moves=compact_columns(board))
            script.record(EVENT_TILES_SPAWNED, spawns=refill_empties(board, self._rng))
            matches = find_matches(board)
        if has_any_legal_move(board):
            return TurnPhase.IDLE
        logger.info("No legal moves left; final score %d", score.current)
        script.record(EVENT_GAME_OVER, score=score.current)
        return TurnPhase.GAME_OVER

    @staticmethod
    def _coerce_position(board: Board, value: Any) -> Optional[Position]:
        try:
            row, col = value
        except (TypeError, ValueError):
            return None
        if isinstance(row, bool) or isinstance(col, bool):
            return None
        if not isinstance(row, int) or not isinstance(col, int):
            return None
        pos = (row, col)
        return pos if board.in_bounds(pos) else None
