from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

import numpy as np

from shuimo.config import (
    DEFAULT_CHUNK_WIDTH,
    DEFAULT_NOISE,
    DEFAULT_VIEWPORT_HEIGHT,
    TREES_PER_CHUNK,
)
from shuimo.elements.element import Element
from shuimo.elements.mountain import Mountain
from shuimo.elements.tree import Tree
from shuimo.world.noise import NoiseConfig, make_noise

logger = logging.getLogger(__name__)


def chunk_rng(seed: int) -> np.random.Generator:
    """Generator for one chunk seed.

    numpy rejects negative seeds; chunks left of the origin can have them, so
    negatives are folded onto the odd non-negative integers.
    """
    seed = int(seed)
    return np.random.default_rng(2 * seed if seed >= 0 else -2 * seed - 1)


@dataclass
class LandscapeGenerator:
    """Chunk generator for a scroll of misty ridges with scattered trees.

    Ridge noise is keyed on `scene_seed` and sampled in world x, so ridges
    continue across chunk borders. Per-chunk detail (tree placement) comes
    from a `numpy.random.Generator` built from the chunk seed alone.
    """

    scene_seed: int
    chunk_width: float = DEFAULT_CHUNK_WIDTH
    viewport_height: float = DEFAULT_VIEWPORT_HEIGHT
    noise_mode: str = DEFAULT_NOISE

    far_ridge: NoiseConfig = field(default_factory=lambda: NoiseConfig(octaves=5, base_freq=0.0025, ridge=0.45))
    near_ridge: NoiseConfig = field(default_factory=lambda: NoiseConfig(octaves=4, base_freq=0.006, ridge=0.25))

    def __post_init__(self) -> None:
        self._far = make_noise(self.scene_seed, self.far_ridge, self.noise_mode)
        self._near = make_noise(self.scene_seed + 7919, self.near_ridge, self.noise_mode)

    def __call__(self, x_offset: float, seed: int) -> List[Element]:
        rng = chunk_rng(seed)
        h = float(self.viewport_height)
        w = float(self.chunk_width)

        elements: List[Element] = [
            Mountain(f"mountain-far-{seed}", x_offset, w, h * 0.62, h * 0.42, self._far, layers=3),
            Mountain(f"mountain-near-{seed}", x_offset, w, h * 0.86, h * 0.22, self._near, layers=2),
        ]

        lo, hi = TREES_PER_CHUNK
        for i in range(int(rng.integers(lo, hi + 1))):
            tx = x_offset + float(rng.uniform(0.05, 0.95)) * w
            ty = h * float(rng.uniform(0.88, 0.97))
            elements.append(Tree(f"tree-{seed}-{i}", tx, ty, h * float(rng.uniform(0.12, 0.22)), rng))

        logger.debug("landscape x=%g seed=%d -> %d elements", x_offset, seed, len(elements))
        return elements
