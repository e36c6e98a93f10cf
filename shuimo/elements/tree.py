from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from shuimo.config import INK_COLOR, TREE_MAX_DEPTH
from shuimo.elements.element import Element
from shuimo.render.types import BrushEffect, Color, DrawStyle, RenderContext
from shuimo.world.bounds import BoundingBox


@dataclass(frozen=True)
class Branch:
    start: Tuple[float, float]
    end: Tuple[float, float]
    width: float
    depth: int


class Tree(Element):
    """Recursively branching ink tree rooted at (x, y) and growing upwards.

    All randomness is drawn from the generator passed in, so the same
    generator state always yields the same tree.
    """

    type = "tree"

    def __init__(
        self,
        element_id: str,
        x: float,
        y: float,
        height: float,
        rng: np.random.Generator,
        *,
        max_depth: int = TREE_MAX_DEPTH,
        ink: Color = Color(*INK_COLOR),
    ) -> None:
        super().__init__(element_id)
        self.x = float(x)
        self.y = float(y)
        self.height = float(height)
        self.max_depth = int(max_depth)
        self.ink = ink
        self.branches: List[Branch] = []
        self.leaves: List[Tuple[float, float, float]] = []

        trunk_len = self.height * 0.35
        self._grow(rng, (self.x, self.y), -np.pi / 2, trunk_len, max(1.0, self.height * 0.04), 0)

        pts = [b.start for b in self.branches] + [b.end for b in self.branches]
        pts += [(lx, ly) for lx, ly, _ in self.leaves]
        arr = np.array(pts, dtype=np.float64)
        x0, y0 = arr.min(axis=0)
        x1, y1 = arr.max(axis=0)
        self._bounds = BoundingBox(float(x0), float(y0), float(x1 - x0), float(y1 - y0))

    def _grow(self, rng: np.random.Generator, start, angle: float, length: float, width: float, depth: int) -> None:
        end = (start[0] + np.cos(angle) * length, start[1] + np.sin(angle) * length)
        self.branches.append(Branch((float(start[0]), float(start[1])), (float(end[0]), float(end[1])), width, depth))

        if depth >= self.max_depth or length < 3.0:
            self.leaves.append((float(end[0]), float(end[1]), float(rng.uniform(1.5, 3.5))))
            return

        for _ in range(int(rng.integers(2, 4))):
            spread = float(rng.normal(0.0, 0.45))
            self._grow(rng, end, angle + spread, length * float(rng.uniform(0.6, 0.8)), width * 0.7, depth + 1)

    def render(self, context: RenderContext) -> None:
        r = context.renderer
        for b in self.branches:
            r.stroke([b.start, b.end],
                     DrawStyle(stroke_color=self.ink, stroke_width=b.width, line_cap="round"),
                     BrushEffect("dry-brush", pressure=1.0 - 0.08 * b.depth))
        leaf = DrawStyle(fill_color=self.ink.with_alpha(0.45))
        for lx, ly, lr in self.leaves:
            r.draw_circle((lx, ly), lr, leaf)
