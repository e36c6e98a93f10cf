from __future__ import annotations

import logging
import math
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional

from shuimo.config import DEFAULT_CHUNK_WIDTH, DEFAULT_MAX_CACHED_CHUNKS, DEFAULT_VIEWPORT_HEIGHT
from shuimo.world.bounds import Viewport
from shuimo.world.chunk import Chunk

if TYPE_CHECKING:
    from shuimo.elements.element import Element

logger = logging.getLogger(__name__)

ChunkGenerator = Callable[[float, int], Iterable["Element"]]


@dataclass
class GeneratedRange:
    min: float = 0.0
    max: float = 0.0


@dataclass(frozen=True)
class MemoryStats:
    chunk_count: int
    total_memory: int
    average_memory_per_chunk: float


@dataclass
class ChunkManagerState:
    chunks: Dict[int, Chunk]
    generated_range: GeneratedRange
    viewport: Viewport = field(default_factory=lambda: Viewport(0, 0, 0, 0))


class ChunkManager:
    """Generates chunks on demand and keeps at most `max_cached_chunks` of them.

    The chunk map doubles as the LRU queue: an OrderedDict keeps the least
    recently used index at the front, and `move_to_end` / `popitem(last=False)`
    make touch and evict O(1).
    """

    def __init__(
        self,
        generator: ChunkGenerator,
        chunk_width: float = DEFAULT_CHUNK_WIDTH,
        viewport_height: float = DEFAULT_VIEWPORT_HEIGHT,
        max_cached_chunks: int = DEFAULT_MAX_CACHED_CHUNKS,
        base_seed: Optional[int] = None,
    ) -> None:
        if chunk_width <= 0:
            raise ValueError(f"chunk_width must be positive, got {chunk_width}")
        if viewport_height <= 0:
            raise ValueError(f"viewport_height must be positive, got {viewport_height}")
        if max_cached_chunks < 1:
            raise ValueError(f"max_cached_chunks must be >= 1, got {max_cached_chunks}")

        self._generator = generator
        self._chunk_width = chunk_width
        self._viewport_height = viewport_height
        self._max_cached_chunks = int(max_cached_chunks)
        self._base_seed = int(base_seed) if base_seed is not None else int(time.time() * 1000)

        self._chunks: "OrderedDict[int, Chunk]" = OrderedDict()
        self.generated_range = GeneratedRange()

    # --- properties ---
    @property
    def chunk_width(self) -> float:
        return self._chunk_width

    @property
    def viewport_height(self) -> float:
        return self._viewport_height

    @property
    def max_cached_chunks(self) -> int:
        return self._max_cached_chunks

    @property
    def base_seed(self) -> int:
        return self._base_seed

    def get_chunk_width(self) -> float:
        return self._chunk_width

    def get_base_seed(self) -> int:
        return self._base_seed

    def __len__(self) -> int:
        return len(self._chunks)

    # --- lookup / generation ---
    def get_chunk(self, index: int) -> Chunk:
        index = int(index)
        chunk = self._chunks.get(index)
        if chunk is not None:
            self.update_lru(index)
            return chunk

        # Generate before touching any state so a failing generator leaves nothing behind.
        chunk = self._generate_chunk(index)
        self._chunks[index] = chunk

        self.generated_range.min = min(self.generated_range.min, chunk.x)
        self.generated_range.max = max(self.generated_range.max, chunk.x + self._chunk_width)

        self.enforce_cache_limit()
        return chunk

    def _generate_chunk(self, index: int) -> Chunk:
        x = index * self._chunk_width
        seed = self._base_seed + index
        t0 = time.perf_counter()
        elements = list(self._generator(x, seed))
        logger.debug(
            "generated chunk %d (x=%s seed=%d) with %d elements in %.1f ms",
            index, x, seed, len(elements), (time.perf_counter() - t0) * 1000.0,
        )
        return Chunk(index, x, self._chunk_width, self._viewport_height, seed, elements)

    def _index_range(self, viewport: Viewport, distance: int = 0) -> range:
        start = math.floor(viewport.x / self._chunk_width) - distance
        end = math.ceil((viewport.x + viewport.width) / self._chunk_width) + distance
        return range(start, end + 1)

    def get_visible_chunks(self, viewport: Viewport) -> List[Chunk]:
        visible: List[Chunk] = []
        for i in self._index_range(viewport):
            chunk = self.get_chunk(i)
            if chunk.intersects(viewport):
                visible.append(chunk)
        return visible

    def preload_chunks(self, viewport: Viewport, distance: int = 1) -> None:
        for i in self._index_range(viewport, int(distance)):
            self.get_chunk(i)

    # --- LRU ---
    def update_lru(self, index: int) -> None:
        if index in self._chunks:
            self._chunks.move_to_end(index)

    def enforce_cache_limit(self) -> None:
        while len(self._chunks) > self._max_cached_chunks and self._chunks:
            index, chunk = self._chunks.popitem(last=False)
            chunk.clear_cache()
            logger.debug("evicted chunk %d", index)

    def lru_order(self) -> List[int]:
        """Resident indices, least recently used first."""
        return list(self._chunks.keys())

    def has_chunk(self, index: int) -> bool:
        return index in self._chunks

    # --- lifecycle ---
    def clear(self) -> None:
        for chunk in self._chunks.values():
            chunk.clear_cache()
        self._chunks.clear()
        self.generated_range = GeneratedRange()

    def set_generator(self, generator: ChunkGenerator) -> None:
        self._generator = generator
        # Cached chunks came from the old generator.
        self.clear()

    # --- diagnostics ---
    def get_state(self) -> ChunkManagerState:
        return ChunkManagerState(
            chunks=dict(self._chunks),
            generated_range=GeneratedRange(self.generated_range.min, self.generated_range.max),
        )

    def get_memory_stats(self) -> MemoryStats:
        total = sum(chunk.get_memory_usage() for chunk in self._chunks.values())
        count = len(self._chunks)
        return MemoryStats(
            chunk_count=count,
            total_memory=total,
            average_memory_per_chunk=(total / count) if count else 0.0,
        )
