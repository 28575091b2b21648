"""Game state resource describing where the current turn stands."""
from dataclasses import dataclass
from enum import Enum, auto


class TurnPhase(Enum):
    """Turn state machine; only IDLE accepts a swap."""
    IDLE = auto()
    SWAPPING = auto()
    CASCADING = auto()
    GAME_OVER = auto()


class GameStatus(Enum):
    ACTIVE = auto()
    OVER = auto()


@dataclass
class GameState:
    """Singleton component storing the current turn phase."""
    phase: TurnPhase = TurnPhase.IDLE

    @property
    def status(self) -> GameStatus:
        return GameStatus.OVER if self.phase is TurnPhase.GAME_OVER else GameStatus.ACTIVE

    @property
    def accepts_swaps(self) -> bool:
        return self.phase is TurnPhase.IDLE

    @property
    def turn_in_flight(self) -> bool:
        return self.phase in (TurnPhase.SWAPPING, TurnPhase.CASCADING)
