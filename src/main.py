"""Entry point for the match-three puzzle.

Sets up the ECS world, event bus, systems and an Arcade window that replays
each turn's event script with simple tweens.
"""
import logging
from collections import deque

import arcade
from arcade import Window, run, set_background_color, color
from match3.world import create_world
from match3.constants import (GRID_ROWS, GRID_COLS, TILE_SIZE, BOARD_MARGIN, HUD_HEIGHT, SWAP_DURATION,
                              SWAP_BACK_DURATION, CLEAR_DURATION, FALL_DURATION, SPAWN_DURATION, SPAWN_STAGGER)
from match3.events.bus import (EventBus, EVENT_TILE_SWAP_REQUEST, EVENT_RESTART_REQUEST, EVENT_GAME_INITIALIZED,
                               EVENT_GAME_RESTARTED, EVENT_TILE_SWAP_ACCEPTED, EVENT_TILE_SWAP_REJECTED,
                               EVENT_MATCHES_CLEARED, EVENT_TILES_FELL, EVENT_TILES_SPAWNED, EVENT_GAME_OVER,
                               EVENT_BEST_SCORE_CHANGED)
from match3.systems.board import BoardSystem
from match3.systems.board_ops import find_valid_swaps
from match3.systems.match_resolution import MatchResolutionSystem
from match3.systems.game_flow_system import GameFlowSystem
from match3.systems.best_score_system import BestScoreSystem

TILE_COLORS = {
    1: (255, 71, 87),
    2: (254, 202, 87),
    3: (39, 174, 96),
    4: (46, 204, 113),
    5: (52, 152, 219),
}
TILE_GLYPHS = {1: "G", 2: "C", 3: "S", 4: "B", 5: "T"}

PLAYBACK_EVENTS = (
    EVENT_GAME_INITIALIZED,
    EVENT_GAME_RESTARTED,
    EVENT_TILE_SWAP_ACCEPTED,
    EVENT_TILE_SWAP_REJECTED,
    EVENT_MATCHES_CLEARED,
    EVENT_TILES_FELL,
    EVENT_TILES_SPAWNED,
    EVENT_GAME_OVER,
)


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


class Match3Window(Window):
    def __init__(self):
        width = GRID_COLS * TILE_SIZE + BOARD_MARGIN * 2
        height = GRID_ROWS * TILE_SIZE + BOARD_MARGIN * 2 + HUD_HEIGHT
        super().__init__(width, height, "Match Three")
        self.set_update_rate(1/60)
        self.event_bus = EventBus()
        self.world = create_world()

        # Presentation state: the grid as currently shown and the queued script.
        self.visual = [[0] * GRID_COLS for _ in range(GRID_ROWS)]
        self.queue = deque()
        self.current = None
        self.elapsed = 0.0
        self.score = 0
        self.best = 0
        self.message = "Swipe between neighbouring tiles to swap them"
        self.game_over = False
        self.press_cell = None
        self.hint = None
        for name in PLAYBACK_EVENTS:
            self.event_bus.subscribe(name, self._queue_handler(name))
        self.event_bus.subscribe(EVENT_BEST_SCORE_CHANGED, self.on_best_score_changed)

        self.best_score_system = BestScoreSystem(self.world, self.event_bus)
        self.best = self.best_score_system.best
        self.board_system = BoardSystem(self.world, self.event_bus, rows=GRID_ROWS, cols=GRID_COLS)
        self.match_resolution_system = MatchResolutionSystem(self.world, self.event_bus)
        self.game_flow_system = GameFlowSystem(self.world, self.event_bus, self.board_system)
        set_background_color(color.BLACK)
        self.game_flow_system.start()

    # ------------------------------------------------------------------
    # Event playback
    # ------------------------------------------------------------------

    def _queue_handler(self, name):
        def handler(sender, **payload):
            self.queue.append((name, payload))
        return handler

    def on_best_score_changed(self, sender, **kwargs):
        self.best = kwargs.get('best', self.best)

    @property
    def idle(self) -> bool:
        return self.current is None and not self.queue

    def _duration(self, name, payload) -> float:
        if name == EVENT_TILE_SWAP_ACCEPTED:
            return SWAP_DURATION
        if name == EVENT_TILE_SWAP_REJECTED:
            return SWAP_BACK_DURATION
        if name == EVENT_MATCHES_CLEARED:
            return CLEAR_DURATION
        if name == EVENT_TILES_FELL:
            return FALL_DURATION if payload['moves'] else 0.0
        if name == EVENT_TILES_SPAWNED:
            return SPAWN_DURATION + SPAWN_STAGGER * max(0, len(payload['spawns']) - 1)
        return 0.0

    def on_update(self, delta_time: float):
        if self.current is None:
            if not self.queue:
                return
            self.current = self.queue.popleft()
            self.elapsed = 0.0
            self._begin(*self.current)
        self.elapsed += delta_time
        name, payload = self.current
        if self.elapsed >= self._duration(name, payload):
            self._finish(name, payload)
            self.current = None

    def _begin(self, name, payload):
        self.hint = None
        if name == EVENT_MATCHES_CLEARED:
            self.score = payload['score']

    def _finish(self, name, payload):
        if name in (EVENT_GAME_INITIALIZED, EVENT_GAME_RESTARTED):
            self.visual = [list(row) for row in payload['grid']]
            self.score = 0
            self.game_over = False
            self.message = "Swipe between neighbouring tiles to swap them"
        elif name == EVENT_TILE_SWAP_ACCEPTED:
            (sr, sc), (dr, dc) = payload['src'], payload['dst']
            self.visual[sr][sc], self.visual[dr][dc] = self.visual[dr][dc], self.visual[sr][sc]
        elif name == EVENT_MATCHES_CLEARED:
            for row, col in payload['positions']:
                self.visual[row][col] = 0
        elif name == EVENT_TILES_FELL:
            for move in payload['moves']:
                self.visual[move.source[0]][move.source[1]] = 0
            for move in payload['moves']:
                self.visual[move.target[0]][move.target[1]] = move.value
        elif name == EVENT_TILES_SPAWNED:
            for spawn in payload['spawns']:
                self.visual[spawn.position[0]][spawn.position[1]] = spawn.value
        elif name == EVENT_GAME_OVER:
            self.game_over = True
            self.message = f"Game over! Final score {payload['score']}. Press R to play again"

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def _cell_origin(self, row: float, col: float):
        left = BOARD_MARGIN + col * TILE_SIZE
        bottom = BOARD_MARGIN + (GRID_ROWS - 1 - row) * TILE_SIZE
        return left, bottom

    def _draw_tile(self, row: float, col: float, value: int, scale: float = 1.0):
        if value <= 0 or scale <= 0:
            return
        left, bottom = self._cell_origin(row, col)
        cx = left + TILE_SIZE / 2
        cy = bottom + TILE_SIZE / 2
        half = (TILE_SIZE / 2 - 3) * scale
        arcade.draw_lrbt_rectangle_filled(cx - half, cx + half, cy - half, cy + half, TILE_COLORS[value])
        arcade.draw_lrbt_rectangle_outline(cx - half, cx + half, cy - half, cy + half, color.WHITE, 2)
        if scale > 0.5:
            arcade.draw_text(TILE_GLYPHS[value], cx, cy, color.WHITE, int(28 * scale),
                             anchor_x="center", anchor_y="center")

    def _hidden_cells(self):
        if self.current is None:
            return set()
        name, payload = self.current
        if name in (EVENT_TILE_SWAP_ACCEPTED, EVENT_TILE_SWAP_REJECTED):
            return {payload['src'], payload['dst']}
        if name == EVENT_MATCHES_CLEARED:
            return set(payload['positions'])
        if name == EVENT_TILES_FELL:
            return {move.source for move in payload['moves']} | {move.target for move in payload['moves']}
        if name == EVENT_TILES_SPAWNED:
            return {spawn.position for spawn in payload['spawns']}
        return set()

    def _draw_current(self):
        name, payload = self.current
        duration = self._duration(name, payload) or 1.0
        t = min(1.0, self.elapsed / duration)
        if name in (EVENT_TILE_SWAP_ACCEPTED, EVENT_TILE_SWAP_REJECTED):
            if name == EVENT_TILE_SWAP_REJECTED:
                # Out and back again.
                t = 1.0 - abs(1.0 - 2.0 * t)
            (sr, sc), (dr, dc) = payload['src'], payload['dst']
            src_value, dst_value = self.visual[sr][sc], self.visual[dr][dc]
            self._draw_tile(_lerp(sr, dr, t), _lerp(sc, dc, t), src_value)
            self._draw_tile(_lerp(dr, sr, t), _lerp(dc, sc, t), dst_value)
        elif name == EVENT_MATCHES_CLEARED:
            for row, col in payload['positions']:
                self._draw_tile(row, col, self.visual[row][col], 1.0 - t)
        elif name == EVENT_TILES_FELL:
            for move in payload['moves']:
                row = _lerp(move.source[0], move.target[0], t)
                self._draw_tile(row, move.target[1], move.value)
        elif name == EVENT_TILES_SPAWNED:
            for index, spawn in enumerate(payload['spawns']):
                local = (self.elapsed - index * SPAWN_STAGGER) / SPAWN_DURATION
                local = max(0.0, min(1.0, local))
                row, col = spawn.position
                self._draw_tile(_lerp(-1, row, local), col, spawn.value)

    def on_draw(self):
        self.clear()
        hidden = self._hidden_cells()
        for row in range(GRID_ROWS):
            for col in range(GRID_COLS):
                if (row, col) in hidden:
                    continue
                self._draw_tile(row, col, self.visual[row][col])
        if self.current is not None:
            self._draw_current()
        if self.hint is not None:
            for row, col in self.hint:
                left, bottom = self._cell_origin(row, col)
                arcade.draw_lrbt_rectangle_outline(left, left + TILE_SIZE, bottom, bottom + TILE_SIZE,
                                                   color.YELLOW, 4)
        top = self.height - 10
        arcade.draw_text(f"Score: {self.score}", BOARD_MARGIN, top - 24, color.WHITE, 18)
        arcade.draw_text(f"Best: {self.best}", self.width - BOARD_MARGIN - 140, top - 24, color.WHITE, 18)
        arcade.draw_text(self.message, BOARD_MARGIN, top - 60, color.LIGHT_GRAY, 11)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def _cell_at(self, x: float, y: float):
        col = int((x - BOARD_MARGIN) // TILE_SIZE)
        row = GRID_ROWS - 1 - int((y - BOARD_MARGIN) // TILE_SIZE)
        if 0 <= row < GRID_ROWS and 0 <= col < GRID_COLS and x >= BOARD_MARGIN and y >= BOARD_MARGIN:
            return (row, col)
        return None

    def on_mouse_press(self, x, y, button, modifiers):
        if button != arcade.MOUSE_BUTTON_LEFT or not self.idle or self.game_over:
            self.press_cell = None
            return
        self.press_cell = self._cell_at(x, y)

    def on_mouse_release(self, x, y, button, modifiers):
        start, self.press_cell = self.press_cell, None
        if start is None or not self.idle:
            return
        end = self._cell_at(x, y)
        if end is not None and end != start:
            self.event_bus.emit(EVENT_TILE_SWAP_REQUEST, src=start, dst=end)

    def on_key_press(self, symbol, modifiers):
        if symbol == arcade.key.R and self.idle:
            self.event_bus.emit(EVENT_RESTART_REQUEST)
        elif symbol == arcade.key.H and self.idle and not self.game_over:
            swaps = find_valid_swaps(self.board_system.board)
            self.hint = swaps[0] if swaps else None


def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    Match3Window()
    run()


if __name__ == "__main__":
    main()
