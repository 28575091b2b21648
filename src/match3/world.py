import random

from esper import World
from match3.components.game_state import GameState
from match3.components.score import Score


def create_world(*, rng: random.Random | None = None) -> World:
    world = World()
    setattr(world, "random", rng or random.Random())

    # Singleton resources shared by every system.
    world.create_entity(GameState(), Score())
    return world
