from __future__ import annotations

import copy
from abc import ABC, abstractmethod

from shuimo.render.types import RenderContext
from shuimo.world.bounds import BoundingBox


class Element(ABC):
    """Something a chunk can hold and draw."""

    type: str = "element"

    def __init__(self, element_id: str) -> None:
        self.id = element_id
        self._bounds = BoundingBox(0, 0, 0, 0)

    @property
    def bounds(self) -> BoundingBox:
        return self._bounds.copy()

    def get_bounds(self) -> BoundingBox:
        return self._bounds.copy()

    @abstractmethod
    def render(self, context: RenderContext) -> None:
        raise NotImplementedError

    def clone(self) -> "Element":
        return copy.deepcopy(self)

    def __repr__(self) -> str:
        b = self._bounds
        return f"<{self.__class__.__name__} id={self.id} bounds=({b.x:g},{b.y:g},{b.width:g},{b.height:g})>"
