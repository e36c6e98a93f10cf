from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from shuimo.config import (
    DEFAULT_CHUNK_WIDTH,
    DEFAULT_ENABLE_CACHING,
    DEFAULT_MAX_CACHED_CHUNKS,
    DEFAULT_PRELOAD_DISTANCE,
)
from shuimo.render.renderer import Renderer
from shuimo.render.types import BLACK, DrawStyle, ExportFormat, RenderContext, Transform
from shuimo.world.bounds import Viewport
from shuimo.world.chunk import Chunk
from shuimo.world.chunk_manager import ChunkGenerator, ChunkManager, ChunkManagerState, MemoryStats

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChunkRendererOptions:
    viewport_height: float
    chunk_width: float = DEFAULT_CHUNK_WIDTH
    max_cached_chunks: int = DEFAULT_MAX_CACHED_CHUNKS
    seed: Optional[int] = None  # None: derived from the clock by the manager
    enable_caching: bool = DEFAULT_ENABLE_CACHING
    preload_distance: int = DEFAULT_PRELOAD_DISTANCE

    def __post_init__(self) -> None:
        if self.viewport_height <= 0:
            raise ValueError(f"viewport_height must be positive, got {self.viewport_height}")
        if self.chunk_width <= 0:
            raise ValueError(f"chunk_width must be positive, got {self.chunk_width}")
        if self.max_cached_chunks < 1:
            raise ValueError(f"max_cached_chunks must be >= 1, got {self.max_cached_chunks}")
        if self.preload_distance < 0:
            raise ValueError(f"preload_distance must be >= 0, got {self.preload_distance}")


class ChunkRenderer:
    """Scrolls an endless scene by drawing only the chunks under the viewport.

    Each frame: clear, resolve visible chunks, warm the neighbours, then draw
    the visible ones in ascending index order inside a save/translate/restore
    scope. The restore runs even when an element's render raises.
    """

    def __init__(self, renderer: Renderer, generator: ChunkGenerator, options: ChunkRendererOptions) -> None:
        self.renderer = renderer
        self.enable_caching = bool(options.enable_caching)
        self.preload_distance = int(options.preload_distance)
        self.scroll_x = 0.0

        self.viewport = Viewport(0, 0, renderer.width, options.viewport_height)
        self.manager = ChunkManager(
            generator,
            chunk_width=options.chunk_width,
            viewport_height=options.viewport_height,
            max_cached_chunks=options.max_cached_chunks,
            base_seed=options.seed,
        )

        self.default_style = DrawStyle(stroke_color=BLACK, stroke_width=1.0, opacity=1.0)
        self.default_transform = Transform()

    # --- scrolling ---
    def set_scroll_position(self, x: float) -> None:
        self.scroll_x = x
        self.viewport.x = x

    def get_scroll_position(self) -> float:
        return self.scroll_x

    def scroll(self, delta_x: float) -> None:
        self.set_scroll_position(self.scroll_x + delta_x)

    # --- rendering ---
    def render_viewport(self) -> List[Chunk]:
        self.renderer.clear()

        visible = self.manager.get_visible_chunks(self.viewport)
        if self.preload_distance > 0:
            self.manager.preload_chunks(self.viewport, self.preload_distance)

        self.renderer.save()
        try:
            self.renderer.translate(-self.viewport.x, 0)
            for chunk in visible:
                self._render_chunk(chunk)
        finally:
            self.renderer.restore()
        return visible

    def _render_chunk(self, chunk: Chunk) -> None:
        context = RenderContext(
            renderer=self.renderer,
            style=copy.copy(self.default_style),
            transform=copy.copy(self.default_transform),
        )
        chunk.render(context, self.enable_caching)

    # --- viewport ---
    def update_viewport(self, width: float, height: float) -> None:
        self.viewport.width = width
        self.viewport.height = height

    def get_viewport(self) -> Viewport:
        return self.viewport.copy()

    def screen_to_world(self, screen_x: float, screen_y: float) -> tuple[float, float]:
        return screen_x + self.viewport.x, screen_y + self.viewport.y

    def world_to_screen(self, world_x: float, world_y: float) -> tuple[float, float]:
        return world_x - self.viewport.x, world_y - self.viewport.y

    # --- manager pass-throughs ---
    def get_chunk(self, index: int) -> Chunk:
        return self.manager.get_chunk(index)

    def has_chunk(self, index: int) -> bool:
        return self.manager.has_chunk(index)

    def set_generator(self, generator: ChunkGenerator) -> None:
        self.manager.set_generator(generator)

    def clear(self) -> None:
        self.manager.clear()
        self.renderer.clear()
        self.set_scroll_position(0)

    def get_memory_stats(self) -> MemoryStats:
        return self.manager.get_memory_stats()

    def get_chunk_width(self) -> float:
        return self.manager.chunk_width

    def get_renderer(self) -> Renderer:
        return self.renderer

    def get_state(self) -> ChunkManagerState:
        state = self.manager.get_state()
        state.viewport = self.get_viewport()
        return state

    def export(self, fmt: ExportFormat) -> Union[str, bytes]:
        return self.renderer.export(fmt)
