"""Drawing surface contract for the starfield."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


class Canvas(Protocol):
    def clear(self, width: int, height: int) -> None: ...

    def fill_circle(self, x: float, y: float, radius: float, color: str, alpha: float) -> None: ...


@dataclass(frozen=True)
class CircleCall:
    x: float
    y: float
    radius: float
    color: str
    alpha: float


@dataclass()
class RecordingCanvas:
    """Keeps the draw calls of the most recent frame."""

    width: int = 0
    height: int = 0
    frames: int = 0
    calls: list[CircleCall] = field(default_factory=list)

    def clear(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.frames += 1
        self.calls = []

    def fill_circle(self, x: float, y: float, radius: float, color: str, alpha: float) -> None:
        self.calls.append(CircleCall(x, y, radius, color, alpha))
