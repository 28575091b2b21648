"""Starts and restarts games."""
from __future__ import annotations

import logging

from esper import World

from match3.components.game_state import TurnPhase
from match3.events.bus import (
    EVENT_GAME_INITIALIZED,
    EVENT_GAME_RESTARTED,
    EVENT_RESTART_REQUEST,
    EventBus,
)
from match3.systems.board import BoardSystem
from match3.utils.game_state import get_game_state, get_score, set_turn_phase

logger = logging.getLogger(__name__)


class GameFlowSystem:
    """Announces the opening board and handles restart requests."""

    def __init__(self, world: World, event_bus: EventBus, board_system: BoardSystem) -> None:
        self.world = world
        self.event_bus = event_bus
        self.board_system = board_system
        self.event_bus.subscribe(EVENT_RESTART_REQUEST, self._on_restart_request)

    def start(self) -> bool:
        """Publish the board built by the BoardSystem as the opening position.

        Only an idle game can be announced; a finished game stays over until restart.
        """
        state = get_game_state(self.world)
        if state.phase is not TurnPhase.IDLE:
            logger.debug("Start ignored while %s", state.phase.name)
            return False
        self.event_bus.emit(EVENT_GAME_INITIALIZED, grid=self.board_system.board.snapshot())
        return True

    def restart(self) -> bool:
        """Deal a new board and zero the score; refused while a turn is in flight."""
        state = get_game_state(self.world)
        if state.turn_in_flight:
            logger.debug("Restart ignored while %s", state.phase.name)
            return False
        board = self.board_system.reset_board()
        get_score(self.world).current = 0
        set_turn_phase(self.world, TurnPhase.IDLE)
        logger.info("Game restarted")
        self.event_bus.emit(EVENT_GAME_RESTARTED, grid=board.snapshot())
        return True

    # Event handlers -----------------------------------------------------

    def _on_restart_request(self, sender, **payload) -> None:
        self.restart()
