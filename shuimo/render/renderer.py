from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Union

import numpy as np

from shuimo.render.types import BrushEffect, DrawStyle, ExportFormat, Vec2
from shuimo.util.math import apply_affine, identity, rotation, scaling, translation


class Renderer(ABC):
    """Base for drawing backends.

    Owns the current 2D affine transform and a stack of saved ones. Backends
    map points through `transform_points` before drawing.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self._transform = identity()
        self._stack: List[np.ndarray] = []

    # --- transform stack ---
    @property
    def transform(self) -> np.ndarray:
        return self._transform.copy()

    @property
    def depth(self) -> int:
        return len(self._stack)

    def save(self) -> None:
        self._stack.append(self._transform.copy())

    def restore(self) -> None:
        if not self._stack:
            raise IndexError("restore() without matching save()")
        self._transform = self._stack.pop()

    def translate(self, dx: float, dy: float) -> None:
        self._transform = self._transform @ translation(dx, dy)

    def rotate(self, angle: float) -> None:
        self._transform = self._transform @ rotation(angle)

    def scale(self, sx: float, sy: Optional[float] = None) -> None:
        self._transform = self._transform @ scaling(sx, sx if sy is None else sy)

    def reset_transform(self) -> None:
        self._transform = identity()
        self._stack.clear()

    def transform_points(self, points: Sequence[Vec2]) -> np.ndarray:
        return apply_affine(self._transform, points)

    def transform_length(self, length: float) -> float:
        """Scale a length (radius, stroke width) by the current transform's mean scale."""
        det = abs(float(np.linalg.det(self._transform[:2, :2])))
        return float(length) * float(np.sqrt(det))

    # --- drawing ---
    @abstractmethod
    def draw_path(self, points: Sequence[Vec2], style: DrawStyle) -> None:
        raise NotImplementedError

    @abstractmethod
    def draw_polygon(self, points: Sequence[Vec2], style: DrawStyle) -> None:
        raise NotImplementedError

    @abstractmethod
    def draw_circle(self, center: Vec2, radius: float, style: DrawStyle) -> None:
        raise NotImplementedError

    def stroke(self, points: Sequence[Vec2], style: DrawStyle, brush: Optional[BrushEffect] = None) -> None:
        """Open stroke; a brush scales the width by its pressure."""
        if len(points) < 2:
            return
        width = style.stroke_width if style.stroke_width is not None else 1.0
        if brush is not None:
            width *= brush.pressure
        self.draw_path(points, DrawStyle(
            stroke_color=style.stroke_color,
            stroke_width=width,
            line_cap=style.line_cap,
            line_join=style.line_join,
            opacity=style.opacity,
            blur=style.blur if brush is None else _wet_blur(style.blur, brush),
        ))

    @abstractmethod
    def clear(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def export(self, fmt: ExportFormat) -> Union[str, bytes]:
        raise NotImplementedError


def _wet_blur(blur: Optional[float], brush: BrushEffect) -> Optional[float]:
    if brush.wetness > 0.5:
        return (blur or 0.0) + (brush.wetness - 0.5) * 4.0
    return blur
