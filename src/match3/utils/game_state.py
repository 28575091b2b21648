from __future__ import annotations

from esper import World

from match3.components.game_state import GameState, TurnPhase
from match3.components.score import Score


def get_game_state(world: World) -> GameState:
    """Return the shared GameState component, creating it if absent."""
    for _, state in world.get_component(GameState):
        return state
    state = GameState()
    world.create_entity(state)
    return state


def get_score(world: World) -> Score:
    """Return the shared Score component, creating it if absent."""
    for _, score in world.get_component(Score):
        return score
    score = Score()
    world.create_entity(score)
    return score


def set_turn_phase(world: World, phase: TurnPhase) -> TurnPhase:
    """Move the turn state machine to ``phase`` and return the previous phase."""
    state = get_game_state(world)
    previous = state.phase
    state.phase = phase
    return previous
