from dataclasses import dataclass


@dataclass(slots=True)
class Score:
    """Points earned this game plus the best score seen by the score store."""
    current: int = 0
    best: int = 0
