"""
conftest.py
-----------
Shared pytest fixtures: a minimal element, a call-counting generator and a
renderer that records the calls made on it.
"""

import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")  # headless pygame for CI

import pytest

from shuimo.render.renderer import Renderer
from shuimo.world.bounds import BoundingBox


class MockElement:
    type = "mock"

    def __init__(self, element_id, x, y, width=50, height=50, on_render=None):
        self.id = element_id
        self.bounds = BoundingBox(x, y, width, height)
        self.on_render = on_render

    def get_bounds(self):
        return self.bounds.copy()

    def render(self, context):
        if self.on_render is not None:
            self.on_render(self, context)

    def clone(self):
        return MockElement(self.id, self.bounds.x, self.bounds.y, self.bounds.width, self.bounds.height)


class RecordingRenderer(Renderer):
    """Renderer that draws nothing and logs every call as a tuple."""

    def __init__(self, width=1000, height=800):
        super().__init__(width, height)
        self.calls = []

    def save(self):
        self.calls.append(("save",))
        super().save()

    def restore(self):
        self.calls.append(("restore",))
        super().restore()

    def translate(self, dx, dy):
        self.calls.append(("translate", dx, dy))
        super().translate(dx, dy)

    def draw_path(self, points, style):
        self.calls.append(("path", len(points)))

    def draw_polygon(self, points, style):
        self.calls.append(("polygon", len(points)))

    def draw_circle(self, center, radius, style):
        self.calls.append(("circle", center, radius))

    def clear(self):
        self.calls.append(("clear",))
        self.reset_transform()

    def export(self, fmt):
        self.calls.append(("export", fmt))
        return f"exported:{fmt}"

    def names(self):
        return [c[0] for c in self.calls]


class CountingGenerator:
    """Three mock elements per chunk; remembers every (x, seed) it was asked for."""

    def __init__(self, tag="gen"):
        self.tag = tag
        self.calls = []

    def __call__(self, x_offset, seed):
        self.calls.append((x_offset, seed))
        return [
            MockElement(f"{self.tag}-{x_offset}-1", x_offset + 100, 200),
            MockElement(f"{self.tag}-{x_offset}-2", x_offset + 200, 300),
            MockElement(f"{self.tag}-{x_offset}-3", x_offset + 300, 400),
        ]


@pytest.fixture
def generator():
    return CountingGenerator()


@pytest.fixture
def recording_renderer():
    return RecordingRenderer()


@pytest.fixture
def make_element():
    return MockElement
