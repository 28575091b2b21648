from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Use weak=False to retain strong reference to bound methods so systems not kept in a variable still receive events.
        sig.connect(fn, weak=False)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# INPUT
# ============================================================================
EVENT_TILE_SWAP_REQUEST = "tile_swap_request"      # payload: src=(r,c), dst=(r,c)
EVENT_RESTART_REQUEST = "restart_request"          # payload: None


# ============================================================================
# BOARD LIFECYCLE
# ============================================================================
EVENT_GAME_INITIALIZED = "game_initialized"        # payload: grid=list[list[int]]
EVENT_GAME_RESTARTED = "game_restarted"            # payload: grid=list[list[int]]
EVENT_BOARD_ANOMALY = "board_anomaly"              # payload: reason=str, positions=[(r,c),...]


# ============================================================================
# TURN RESOLUTION (published in script order)
# ============================================================================
EVENT_TILE_SWAP_ACCEPTED = "tile_swap_accepted"    # payload: src=(r,c), dst=(r,c), src_value=int, dst_value=int
EVENT_TILE_SWAP_REJECTED = "tile_swap_rejected"    # payload: src=(r,c), dst=(r,c)
EVENT_MATCHES_CLEARED = "matches_cleared"          # payload: positions=[(r,c),...], count=int, score=int, depth=int
EVENT_TILES_FELL = "tiles_fell"                    # payload: moves=list[GravityMove]
EVENT_TILES_SPAWNED = "tiles_spawned"              # payload: spawns=list[TileSpawn]
EVENT_GAME_OVER = "game_over"                      # payload: score=int


# ============================================================================
# SCORE
# ============================================================================
EVENT_BEST_SCORE_CHANGED = "best_score_changed"    # payload: best=int, previous=int


TURN_EVENTS = (
    EVENT_TILE_SWAP_ACCEPTED,
    EVENT_TILE_SWAP_REJECTED,
    EVENT_MATCHES_CLEARED,
    EVENT_TILES_FELL,
    EVENT_TILES_SPAWNED,
    EVENT_GAME_OVER,
)
