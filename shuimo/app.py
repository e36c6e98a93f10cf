from __future__ import annotations

import logging
import time
from pathlib import Path

import pygame

from shuimo.config import (
    APP_VERSION,
    FPS_CAP,
    SCROLL_SMOOTH_K,
    STATS_LOG_INTERVAL_S,
    WHEEL_SCROLL_STEP,
)
from shuimo.render.chunk_renderer import ChunkRenderer, ChunkRendererOptions
from shuimo.render.surface_renderer import SurfaceRenderer
from shuimo.render.svg_renderer import SVGRenderer
from shuimo.util.math import exp_smooth
from shuimo.world.landscape import LandscapeGenerator

logger = logging.getLogger(__name__)

_EXPORT_FORMATS = {".png": "png", ".jpg": "jpeg", ".jpeg": "jpeg", ".svg": "svg"}


def _log_stats(view: ChunkRenderer) -> None:
    stats = view.get_memory_stats()
    state = view.get_state()
    logger.info(
        "scroll=%.0f chunks=%d mem~%dB (avg %.0fB) generated=[%g, %g]",
        view.get_scroll_position(), stats.chunk_count, stats.total_memory,
        stats.average_memory_per_chunk, state.generated_range.min, state.generated_range.max,
    )


def export_viewport(
    path: Path,
    *,
    seed: int,
    scroll_x: float,
    width: int,
    height: int,
    chunk_width: float,
    max_cached: int,
    preload: int,
    caching: bool,
    noise_mode: str,
) -> Path:
    """Render one viewport without a window and write it to `path` (format from suffix)."""
    fmt = _EXPORT_FORMATS.get(path.suffix.lower())
    if fmt is None:
        raise ValueError(f"Cannot export to {path.name}: expected one of {sorted(_EXPORT_FORMATS)}")

    renderer = SVGRenderer(width, height) if fmt == "svg" else SurfaceRenderer(width, height)
    generator = LandscapeGenerator(scene_seed=seed, chunk_width=chunk_width, viewport_height=height, noise_mode=noise_mode)
    view = ChunkRenderer(renderer, generator, ChunkRendererOptions(
        viewport_height=height,
        chunk_width=chunk_width,
        max_cached_chunks=max_cached,
        seed=seed,
        enable_caching=caching,
        preload_distance=preload,
    ))
    view.set_scroll_position(scroll_x)
    drawn = view.render_viewport()

    data = view.export(fmt)
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(data, bytes):
        path.write_bytes(data)
    else:
        path.write_text(data, encoding="utf-8")
    logger.info("exported %s (%d chunks drawn, scroll=%g)", path, len(drawn), scroll_x)
    return path


def run_app(
    *,
    seed: int,
    width: int,
    height: int,
    chunk_width: float,
    max_cached: int,
    preload: int,
    caching: bool,
    scroll_speed: float,
    noise_mode: str,
    debug: bool,
) -> None:
    pygame.init()
    flags = pygame.RESIZABLE
    screen = pygame.display.set_mode((width, height), flags)
    pygame.display.set_caption(f"shuimo v{APP_VERSION} (seed={seed})")

    renderer = SurfaceRenderer(width, height, surface=screen)
    generator = LandscapeGenerator(scene_seed=seed, chunk_width=chunk_width, viewport_height=height, noise_mode=noise_mode)
    view = ChunkRenderer(renderer, generator, ChunkRendererOptions(
        viewport_height=height,
        chunk_width=chunk_width,
        max_cached_chunks=max_cached,
        seed=seed,
        enable_caching=caching,
        preload_distance=preload,
    ))
    logger.info("shuimo v%s seed=%d chunk_width=%g max_cached=%d preload=%d",
                APP_VERSION, seed, chunk_width, max_cached, preload)

    clock = pygame.time.Clock()
    target_x = 0.0
    drawn_x = None
    last_t = time.perf_counter()
    last_log = last_t
    running = True

    try:
        while running:
            now = time.perf_counter()
            dt = min(now - last_t, 0.05)
            last_t = now

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    running = False
                elif event.type == pygame.MOUSEWHEEL:
                    target_x -= event.y * WHEEL_SCROLL_STEP
                    target_x += event.x * WHEEL_SCROLL_STEP
                elif event.type == pygame.VIDEORESIZE:
                    w, h = max(64, event.w), max(64, event.h)
                    screen = pygame.display.set_mode((w, h), flags)
                    renderer.attach(screen)
                    view.update_viewport(w, view.get_viewport().height)
                    drawn_x = None

            keys = pygame.key.get_pressed()
            direction = int(keys[pygame.K_RIGHT]) - int(keys[pygame.K_LEFT])
            target_x += direction * scroll_speed * dt

            x = exp_smooth(view.get_scroll_position(), target_x, SCROLL_SMOOTH_K, dt)
            if abs(x - target_x) < 0.25:
                x = target_x
            view.set_scroll_position(x)

            if drawn_x is None or abs(x - drawn_x) >= 0.5:
                view.render_viewport()
                drawn_x = x
                pygame.display.flip()

            if debug and now - last_log >= STATS_LOG_INTERVAL_S:
                last_log = now
                _log_stats(view)

            clock.tick(FPS_CAP)
    finally:
        pygame.quit()
