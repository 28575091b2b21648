"""Ordered record of everything one turn did to the board.

The resolution system runs a whole turn synchronously and records each step
here. Once the board has settled the script is published on the event bus, in
order, so collaborators can replay it at whatever pace they like.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List

from match3.events.bus import EventBus


@dataclass(frozen=True, slots=True)
class TurnEvent:
    name: str
    payload: Dict[str, Any]

    def delivery(self) -> Dict[str, Any]:
        """Payload for one subscriber; lists are copied so the record stays intact."""
        return {key: list(value) if isinstance(value, list) else value for key, value in self.payload.items()}


@dataclass(slots=True)
class TurnScript:
    events: List[TurnEvent] = field(default_factory=list)

    def record(self, name: str, **payload: Any) -> None:
        self.events.append(TurnEvent(name=name, payload=payload))

    def names(self) -> List[str]:
        return [event.name for event in self.events]

    def of_kind(self, name: str) -> List[TurnEvent]:
        return [event for event in self.events if event.name == name]

    def publish(self, event_bus: EventBus) -> None:
        for event in self.events:
            event_bus.emit(event.name, **event.delivery())

    def __iter__(self) -> Iterator[TurnEvent]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)
