from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

import numpy as np

from shuimo.config import PAPER_COLOR
from shuimo.render.renderer import Renderer
from shuimo.render.types import Color, DrawStyle, ExportFormat, Vec2
from shuimo.util.math import svg_matrix, translation

SVG_NS = "http://www.w3.org/2000/svg"


def _num(v: float) -> str:
    s = f"{float(v):.2f}".rstrip("0").rstrip(".")
    return "0" if s in ("", "-0") else s


@dataclass
class _Fragment:
    key: str
    start: int
    outer: np.ndarray
    defs: List[str] = field(default_factory=list)


class SVGRenderer(Renderer):
    """Vector backend that accumulates an SVG document as text.

    Points are transformed before they are written, so plain groups carry no
    transform attribute; `save()`/`restore()` still open and close a `<g>`
    to keep the document structure mirroring the draw calls.

    A fragment is the exception: it is a `<g transform=...>` placed at an
    origin, its contents written relative to that origin and its blur filters
    defined inline under ids prefixed with the fragment key. The text between
    the group tags therefore does not depend on where the fragment was drawn.
    """

    def __init__(self, width: int, height: int, *, background: Optional[Color] = Color(*PAPER_COLOR)) -> None:
        super().__init__(width, height)
        self.background = background
        self._parts: List[str] = []
        self._defs: List[str] = []
        self._filter_id = 0
        self._fragment: Optional[_Fragment] = None

    # --- fragments (used by chunk caching) ---
    def begin_fragment(self, key: str, origin: Vec2) -> None:
        if self._fragment is not None:
            raise RuntimeError(f"fragment {self._fragment.key!r} is still open")
        ox, oy = float(origin[0]), float(origin[1])
        outer = self._transform
        self._parts.append(f'<g transform="{svg_matrix(outer @ translation(ox, oy))}">')
        self._fragment = _Fragment(key, len(self._parts), outer)
        self._transform = translation(-ox, -oy)

    def end_fragment(self) -> str:
        """Close the open fragment and return its contents (without the placing group)."""
        if self._fragment is None:
            raise RuntimeError("end_fragment() without begin_fragment()")
        frag, self._fragment = self._fragment, None
        body = "".join(self._parts[frag.start:])
        if frag.defs:
            body = "<defs>" + "".join(frag.defs) + "</defs>" + body
        del self._parts[frag.start:]
        self._parts.append(body)
        self._parts.append("</g>")
        self._transform = frag.outer
        return body

    # --- transform overrides ---
    def save(self) -> None:
        super().save()
        self._parts.append("<g>")

    def restore(self) -> None:
        super().restore()
        self._parts.append("</g>")

    # --- style ---
    def _blur_filter(self, amount: float) -> str:
        if self._fragment is not None:
            defs = self._fragment.defs
            fid = f"{self._fragment.key}-blur-{len(defs)}"
        else:
            defs = self._defs
            fid = f"blur-{self._filter_id}"
            self._filter_id += 1
        defs.append(f'<filter id="{fid}"><feGaussianBlur stdDeviation="{_num(amount)}"/></filter>')
        return fid

    def _style_attrs(self, style: DrawStyle, *, fill: bool = True) -> str:
        attrs = [f'fill="{style.fill_color.css()}"' if (fill and style.fill_color) else 'fill="none"']
        if style.stroke_color is not None:
            attrs.append(f'stroke="{style.stroke_color.css()}"')
            attrs.append(f'stroke-width="{_num(self.transform_length(style.stroke_width or 1.0))}"')
        if style.line_cap:
            attrs.append(f'stroke-linecap="{style.line_cap}"')
        if style.line_join:
            attrs.append(f'stroke-linejoin="{style.line_join}"')
        if style.opacity is not None:
            attrs.append(f'opacity="{_num(style.opacity)}"')
        if style.blur:
            attrs.append(f'filter="url(#{self._blur_filter(style.blur)})"')
        return " ".join(attrs)

    # --- drawing ---
    def draw_path(self, points: Sequence[Vec2], style: DrawStyle) -> None:
        if len(points) < 2:
            return
        pts = self.transform_points(points)
        d = f"M {_num(pts[0][0])} {_num(pts[0][1])}" + "".join(
            f" L {_num(x)} {_num(y)}" for x, y in pts[1:]
        )
        self._parts.append(f'<path d="{d}" {self._style_attrs(style, fill=False)}/>')

    def draw_polygon(self, points: Sequence[Vec2], style: DrawStyle) -> None:
        if len(points) < 3:
            return
        pts = self.transform_points(points)
        coords = " ".join(f"{_num(x)},{_num(y)}" for x, y in pts)
        self._parts.append(f'<polygon points="{coords}" {self._style_attrs(style)}/>')

    def draw_circle(self, center: Vec2, radius: float, style: DrawStyle) -> None:
        cx, cy = self.transform_points([center])[0]
        r = self.transform_length(radius)
        self._parts.append(
            f'<circle cx="{_num(cx)}" cy="{_num(cy)}" r="{_num(r)}" {self._style_attrs(style)}/>'
        )

    def clear(self) -> None:
        self._parts.clear()
        self._defs.clear()
        self._filter_id = 0
        self._fragment = None
        self.reset_transform()

    # --- export ---
    def to_string(self) -> str:
        head = (
            f'<svg xmlns="{SVG_NS}" width="{self.width}" height="{self.height}" '
            f'viewBox="0 0 {self.width} {self.height}">'
        )
        body: List[str] = [head]
        if self._defs:
            body.append("<defs>" + "".join(self._defs) + "</defs>")
        if self.background is not None:
            body.append(f'<rect width="100%" height="100%" fill="{self.background.css()}"/>')
        body.append("<g>")
        body.extend(self._parts)
        # groups still open from an unmatched save()
        body.append("</g>" * self.depth)
        body.append("</g></svg>")
        return "".join(body)

    def export(self, fmt: ExportFormat) -> Union[str, bytes]:
        if fmt == "svg":
            return self.to_string()
        if fmt == "data-url":
            encoded = base64.b64encode(self.to_string().encode("utf-8")).decode("ascii")
            return f"data:image/svg+xml;base64,{encoded}"
        if fmt in ("png", "jpeg"):
            raise RuntimeError("SVG renderer does not support raster export; use SurfaceRenderer")
        raise ValueError(f"Unsupported export format: {fmt}")
