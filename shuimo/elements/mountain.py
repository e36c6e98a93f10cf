from __future__ import annotations

from typing import List

import numpy as np

from shuimo.config import INK_COLOR, MOUNTAIN_LAYERS, MOUNTAIN_SAMPLE_STEP
from shuimo.elements.element import Element
from shuimo.render.types import BrushEffect, Color, DrawStyle, RenderContext
from shuimo.world.bounds import BoundingBox

_PAPER_MIST = Color(196, 202, 206)


class Mountain(Element):
    """Layered ridge washes over `[x, x + width]`, standing on `base_y`.

    Ridges are sampled from noise in world coordinates, so mountains of
    neighbouring chunks built from the same noise meet without a seam.
    """

    type = "mountain"

    def __init__(
        self,
        element_id: str,
        x: float,
        width: float,
        base_y: float,
        peak_height: float,
        noise,
        *,
        layers: int = MOUNTAIN_LAYERS,
        step: float = MOUNTAIN_SAMPLE_STEP,
        ink: Color = Color(*INK_COLOR),
    ) -> None:
        super().__init__(element_id)
        self.x = float(x)
        self.width = float(width)
        self.base_y = float(base_y)
        self.peak_height = float(peak_height)
        self.layers = max(1, int(layers))
        self.ink = ink

        n = max(2, int(np.ceil(self.width / step)) + 1)
        xs = np.linspace(self.x, self.x + self.width, n)
        self.ridges: List[np.ndarray] = []
        for i in range(self.layers):
            # far layers (small i) sit higher and flatter
            t = i / max(1, self.layers - 1)
            lift = (1.0 - t) * 0.35 * self.peak_height
            h01 = np.clip((noise.profile(xs, row=97.0 * i) + 1.0) * 0.5, 0.0, 1.0)
            ys = self.base_y - lift - h01 * self.peak_height * (0.55 + 0.45 * t)
            self.ridges.append(np.stack([xs, ys], axis=1))

        top = min(float(r[:, 1].min()) for r in self.ridges)
        self._bounds = BoundingBox(self.x, top, self.width, self.base_y - top)

    def render(self, context: RenderContext) -> None:
        r = context.renderer
        for i, ridge in enumerate(self.ridges):
            t = i / max(1, self.layers - 1)
            wash = _PAPER_MIST.lerp(self.ink, 0.25 + 0.55 * t)
            outline = np.vstack([ridge, [[self.x + self.width, self.base_y], [self.x, self.base_y]]])
            r.draw_polygon(outline, DrawStyle(fill_color=wash, opacity=0.35 + 0.45 * t))
            r.stroke(ridge, DrawStyle(stroke_color=self.ink, stroke_width=1.0 + 1.5 * t,
                                      line_cap="round", line_join="round", opacity=0.6 + 0.4 * t),
                     BrushEffect("ink", pressure=0.6 + 0.4 * t))
