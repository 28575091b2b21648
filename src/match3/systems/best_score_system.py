from __future__ import annotations

import json
import logging
from pathlib import Path

from esper import World

from match3.events.bus import (
    EVENT_BEST_SCORE_CHANGED,
    EVENT_MATCHES_CLEARED,
    EventBus,
)
from match3.utils.game_state import get_score

logger = logging.getLogger(__name__)


class BestScoreSystem:
    """Tracks and persists the best score across games."""

    def __init__(
        self,
        world: World,
        event_bus: EventBus,
        *,
        save_path: Path | None = None,
        load_existing: bool = True,
    ) -> None:
        self.world = world
        self.event_bus = event_bus
        self._save_path = Path(save_path) if save_path is not None else self._default_save_path()

        self.event_bus.subscribe(EVENT_MATCHES_CLEARED, self._on_matches_cleared)

        if load_existing:
            self.load_best()
        else:
            self.save_best()

    @staticmethod
    def _default_save_path() -> Path:
        return Path(__file__).resolve().parents[3] / "data" / "best_score.json"

    @property
    def best(self) -> int:
        return get_score(self.world).best

    def load_best(self) -> None:
        score = get_score(self.world)
        try:
            with self._save_path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except FileNotFoundError:
            score.best = 0
            self.save_best()
            return
        except OSError as exc:
            logger.warning("Could not read best score from %s: %s", self._save_path, exc)
            score.best = 0
            return
        except json.JSONDecodeError:
            logger.warning("Best score file %s is corrupt; starting from 0", self._save_path)
            score.best = 0
            self.save_best()
            return
        try:
            score.best = max(0, int(payload.get("best", 0)))
        except (AttributeError, TypeError, ValueError):
            logger.warning("Best score file %s has no usable value; starting from 0", self._save_path)
            score.best = 0
            self.save_best()

    def save_best(self) -> bool:
        try:
            self._save_path.parent.mkdir(parents=True, exist_ok=True)
            with self._save_path.open("w", encoding="utf-8") as handle:
                json.dump({"best": get_score(self.world).best}, handle, indent=2)
        except OSError as exc:
            logger.error("Could not save best score to %s: %s", self._save_path, exc)
            return False
        return True

    # Event handlers -----------------------------------------------------

    def _on_matches_cleared(self, sender, **payload) -> None:
        current = payload.get("score")
        if current is None:
            return
        score = get_score(self.world)
        if current <= score.best:
            return
        previous = score.best
        score.best = current
        self.save_best()
        self.event_bus.emit(EVENT_BEST_SCORE_CHANGED, best=current, previous=previous)
