from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List, Optional

from shuimo.render.types import FragmentSource, RenderContext
from shuimo.world.bounds import BoundingBox

if TYPE_CHECKING:
    from shuimo.elements.element import Element

# Rough per-element cost used by get_memory_usage (diagnostic only).
ELEMENT_COST_ESTIMATE = 100


def _depth_key(element: "Element") -> float:
    return element.get_bounds().y


class Chunk:
    """A fixed-width horizontal slice of the scene.

    Elements are kept sorted by the top of their bounds so that rendering in
    list order paints far (higher up) things first and near things over them.
    """

    def __init__(
        self,
        index: int,
        x: float,
        width: float,
        height: float,
        seed: int,
        elements: Optional[Iterable["Element"]] = None,
    ) -> None:
        self.index = int(index)
        self.x = x
        self.width = width
        self.height = height
        self.seed = int(seed)
        self.id = f"chunk-{self.index}-{self.seed}"
        self.bounds = BoundingBox(x, 0, width, height)
        self.elements: List["Element"] = sorted(elements or (), key=_depth_key)
        self.rendered = False
        self.cached_svg: Optional[str] = None

    def __repr__(self) -> str:
        return f"<Chunk {self.id} x={self.x} elements={len(self.elements)}>"

    def add_element(self, element: "Element") -> None:
        self.elements.append(element)
        # list.sort is stable: equal depths keep insertion order
        self.elements.sort(key=_depth_key)
        self.cached_svg = None

    def remove_element(self, element_id: str) -> bool:
        for i, el in enumerate(self.elements):
            if el.id == element_id:
                del self.elements[i]
                self.cached_svg = None
                return True
        return False

    def contains_point(self, x: float, y: float) -> bool:
        b = self.bounds
        return b.x <= x < b.right and b.y <= y < b.bottom

    def intersects(self, box: BoundingBox) -> bool:
        # Closed intervals: a box touching an edge counts as intersecting.
        b = self.bounds
        return not (
            b.right < box.x
            or b.x > box.x + box.width
            or b.bottom < box.y
            or b.y > box.y + box.height
        )

    def render(self, context: RenderContext, enable_caching: bool = False) -> None:
        """Draw every element in depth order.

        With `enable_caching` on a backend that can capture fragments, the
        chunk's markup relative to its own origin is kept in `cached_svg`, so
        it only changes when the elements do. Elements are drawn on every call
        either way.
        """
        renderer = context.renderer
        if not (enable_caching and isinstance(renderer, FragmentSource)):
            for element in self.elements:
                element.render(context)
            self.rendered = True
            return

        renderer.begin_fragment(self.id, (self.x, 0))
        try:
            for element in self.elements:
                element.render(context)
        finally:
            fragment = renderer.end_fragment()
        self.rendered = True
        self.cached_svg = fragment

    def clear_cache(self) -> None:
        self.cached_svg = None

    def get_memory_usage(self) -> int:
        size = len(self.elements) * ELEMENT_COST_ESTIMATE
        if self.cached_svg:
            size += len(self.cached_svg) * 2
        return size
