from __future__ import annotations

from dataclasses import dataclass

@dataclass
class BoundingBox:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def copy(self) -> "BoundingBox":
        return BoundingBox(self.x, self.y, self.width, self.height)

@dataclass
class Viewport(BoundingBox):
    """Visible world-space rectangle. Only `x` moves while scrolling."""

    def copy(self) -> "Viewport":
        return Viewport(self.x, self.y, self.width, self.height)
