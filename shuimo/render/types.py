from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional, Protocol, Tuple, runtime_checkable

Vec2 = Tuple[float, float]
LineCap = Literal["butt", "round", "square"]
LineJoin = Literal["miter", "round", "bevel"]
BrushKind = Literal["ink", "dry-brush", "wash", "outline"]
ExportFormat = Literal["png", "jpeg", "svg", "data-url"]


@dataclass(frozen=True)
class Color:
    r: int  # 0..255
    g: int
    b: int
    a: float = 1.0  # 0..1

    def with_alpha(self, a: float) -> "Color":
        return Color(self.r, self.g, self.b, a)

    def lerp(self, other: "Color", t: float) -> "Color":
        return Color(
            int(round(self.r + (other.r - self.r) * t)),
            int(round(self.g + (other.g - self.g) * t)),
            int(round(self.b + (other.b - self.b) * t)),
            self.a + (other.a - self.a) * t,
        )

    def css(self) -> str:
        if self.a >= 1.0:
            return f"rgb({self.r},{self.g},{self.b})"
        return f"rgba({self.r},{self.g},{self.b},{self.a:g})"


BLACK = Color(0, 0, 0)


@dataclass
class DrawStyle:
    fill_color: Optional[Color] = None
    stroke_color: Optional[Color] = None
    stroke_width: Optional[float] = None
    line_cap: Optional[LineCap] = None
    line_join: Optional[LineJoin] = None
    opacity: Optional[float] = None
    blur: Optional[float] = None


@dataclass(frozen=True)
class BrushEffect:
    kind: BrushKind = "ink"
    pressure: float = 1.0  # 0..1, scales stroke width
    wetness: float = 0.0   # 0..1, >0.5 bleeds
    texture: float = 0.0   # 0..1, dry-brush gaps


@dataclass
class Transform:
    translate: Vec2 = (0.0, 0.0)
    rotate: float = 0.0  # radians
    scale: Vec2 = (1.0, 1.0)


@dataclass
class RenderContext:
    """What an element receives when asked to draw itself."""
    renderer: Any
    style: DrawStyle = field(default_factory=DrawStyle)
    transform: Transform = field(default_factory=Transform)


@runtime_checkable
class FragmentSource(Protocol):
    """Backends that can capture a block of drawing as position-independent markup."""

    def begin_fragment(self, key: str, origin: Vec2) -> None: ...

    def end_fragment(self) -> str: ...
