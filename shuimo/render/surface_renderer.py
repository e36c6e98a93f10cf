from __future__ import annotations

import base64
import io
from typing import Callable, Optional, Sequence, Tuple, Union

import numpy as np
import pygame

from shuimo.config import PAPER_COLOR
from shuimo.render.renderer import Renderer
from shuimo.render.types import Color, DrawStyle, ExportFormat, Vec2

RGBA = Tuple[int, int, int, int]
Painter = Callable[[pygame.Surface, list, RGBA], None]


def _rgba(color: Color, style: DrawStyle) -> RGBA:
    opacity = 1.0 if style.opacity is None else float(style.opacity)
    a = int(round(max(0.0, min(1.0, color.a * opacity)) * 255))
    return (color.r, color.g, color.b, a)


def _soften(layer: pygame.Surface, blur: float) -> pygame.Surface:
    """Cheap blur: shrink then grow back with smoothscale."""
    w, h = layer.get_size()
    f = 1.0 / (1.0 + float(blur))
    small = pygame.transform.smoothscale(layer, (max(1, int(w * f)), max(1, int(h * f))))
    return pygame.transform.smoothscale(small, (w, h))


class SurfaceRenderer(Renderer):
    """Raster backend drawing into a pygame Surface.

    Translucent shapes are painted on a temporary per-pixel-alpha layer sized
    to the shape and blended onto the target, so ink washes accumulate.
    """

    def __init__(self, width: int, height: int, *, paper: Tuple[int, int, int] = PAPER_COLOR,
                 surface: Optional[pygame.Surface] = None) -> None:
        if surface is not None:
            width, height = surface.get_size()
        super().__init__(width, height)
        self.paper = paper
        self.surface = surface if surface is not None else pygame.Surface((self.width, self.height))
        self.surface.fill(self.paper)

    def attach(self, surface: pygame.Surface) -> None:
        """Draw into an externally owned surface (e.g. the display)."""
        self.surface = surface
        self.width, self.height = surface.get_size()

    # --- painting ---
    def _paint(self, pts: np.ndarray, rgba: RGBA, pad: float, blur: Optional[float], painter: Painter) -> None:
        if rgba[3] >= 255 and not blur:
            painter(self.surface, [tuple(p) for p in pts], rgba)
            return
        if rgba[3] <= 0:
            return

        pad = pad + (2.0 * blur if blur else 0.0)
        x0 = max(int(np.floor(pts[:, 0].min() - pad)), 0)
        y0 = max(int(np.floor(pts[:, 1].min() - pad)), 0)
        x1 = min(int(np.ceil(pts[:, 0].max() + pad)) + 1, self.width)
        y1 = min(int(np.ceil(pts[:, 1].max() + pad)) + 1, self.height)
        if x1 <= x0 or y1 <= y0:
            return

        layer = pygame.Surface((x1 - x0, y1 - y0), pygame.SRCALPHA)
        local = pts - np.array([x0, y0], dtype=np.float64)
        painter(layer, [tuple(p) for p in local], rgba)
        if blur:
            layer = _soften(layer, blur)
        self.surface.blit(layer, (x0, y0))

    def draw_path(self, points: Sequence[Vec2], style: DrawStyle) -> None:
        if len(points) < 2 or style.stroke_color is None:
            return
        pts = self.transform_points(points)
        width = max(1, int(round(self.transform_length(style.stroke_width or 1.0))))
        rgba = _rgba(style.stroke_color, style)

        def painter(target: pygame.Surface, p: list, color: RGBA) -> None:
            if width <= 1:
                pygame.draw.aalines(target, color, False, p)
            else:
                pygame.draw.lines(target, color, False, p, width)
                if style.line_cap == "round":
                    for cx, cy in (p[0], p[-1]):
                        pygame.draw.circle(target, color, (cx, cy), width / 2.0)

        self._paint(pts, rgba, width, style.blur, painter)

    def draw_polygon(self, points: Sequence[Vec2], style: DrawStyle) -> None:
        if len(points) < 3:
            return
        pts = self.transform_points(points)
        if style.fill_color is not None:
            self._paint(pts, _rgba(style.fill_color, style), 1.0, style.blur,
                        lambda target, p, color: pygame.draw.polygon(target, color, p))
        if style.stroke_color is not None:
            width = max(1, int(round(self.transform_length(style.stroke_width or 1.0))))
            self._paint(pts, _rgba(style.stroke_color, style), width, style.blur,
                        lambda target, p, color: pygame.draw.polygon(target, color, p, width))

    def draw_circle(self, center: Vec2, radius: float, style: DrawStyle) -> None:
        c = self.transform_points([center])[0]
        r = self.transform_length(radius)
        box = np.array([[c[0] - r, c[1] - r], [c[0] + r, c[1] + r]])
        # painter receives the box corners; recover the local center from them
        if style.fill_color is not None:
            self._paint(box, _rgba(style.fill_color, style), 1.0, style.blur,
                        lambda target, p, color: pygame.draw.circle(
                            target, color, ((p[0][0] + p[1][0]) / 2, (p[0][1] + p[1][1]) / 2), r))
        if style.stroke_color is not None:
            width = max(1, int(round(self.transform_length(style.stroke_width or 1.0))))
            self._paint(box, _rgba(style.stroke_color, style), width, style.blur,
                        lambda target, p, color: pygame.draw.circle(
                            target, color, ((p[0][0] + p[1][0]) / 2, (p[0][1] + p[1][1]) / 2), r, width))

    def clear(self) -> None:
        self.surface.fill(self.paper)
        self.reset_transform()

    # --- export ---
    def _encode(self, namehint: str) -> bytes:
        buf = io.BytesIO()
        pygame.image.save(self.surface, buf, namehint)
        return buf.getvalue()

    def export(self, fmt: ExportFormat) -> Union[str, bytes]:
        if fmt == "png":
            return self._encode("frame.png")
        if fmt == "jpeg":
            if not pygame.image.get_extended():
                raise RuntimeError("JPEG export needs pygame built with extended image support")
            return self._encode("frame.jpg")
        if fmt == "data-url":
            return "data:image/png;base64," + base64.b64encode(self._encode("frame.png")).decode("ascii")
        if fmt == "svg":
            raise RuntimeError("Raster renderer cannot export SVG; use SVGRenderer")
        raise ValueError(f"Unsupported export format: {fmt}")
