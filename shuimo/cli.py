from __future__ import annotations

import argparse
import logging
import random
from pathlib import Path

from shuimo.app import export_viewport, run_app
from shuimo.config import (
    APP_VERSION,
    DEFAULT_CHUNK_WIDTH,
    DEFAULT_ENABLE_CACHING,
    DEFAULT_MAX_CACHED_CHUNKS,
    DEFAULT_NOISE,
    DEFAULT_PRELOAD_DISTANCE,
    DEFAULT_SCROLL_SPEED,
    DEFAULT_SEED,
    WINDOW_HEIGHT,
    WINDOW_WIDTH,
)
from shuimo.util.log import configure_logging


def _parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="shuimo", description=f"Endless ink-wash landscape scroller v{APP_VERSION}")
    p.add_argument("--seed", default=str(DEFAULT_SEED), help="int seed or 'random' (default: 12345)")
    p.add_argument("--width", type=int, default=WINDOW_WIDTH, help="viewport width in px")
    p.add_argument("--height", type=int, default=WINDOW_HEIGHT, help="viewport height in px (also the chunk height)")
    p.add_argument("--chunk-width", type=float, default=DEFAULT_CHUNK_WIDTH, help="chunk width in px (default: 512)")
    p.add_argument("--max-cached", type=int, default=DEFAULT_MAX_CACHED_CHUNKS, help="chunks kept in memory (default: 10)")
    p.add_argument("--preload", type=int, default=DEFAULT_PRELOAD_DISTANCE, help="chunks generated ahead on each side (default: 1)")
    p.add_argument("--caching", dest="caching", action="store_true", default=DEFAULT_ENABLE_CACHING,
                   help="keep each chunk's SVG fragment after rendering")
    p.add_argument("--no-caching", dest="caching", action="store_false", help="disable chunk fragment caching")
    p.add_argument("--scroll-speed", type=float, default=DEFAULT_SCROLL_SPEED, help="arrow-key scroll speed (px/sec)")
    p.add_argument("--noise", choices=["fast", "simplex"], default=DEFAULT_NOISE, help="ridge noise mode")
    p.add_argument("--debug", action="store_true", help="verbose logging and periodic cache stats")
    p.add_argument("--log-file", type=Path, default=None, help="also write logs to this file (rotated)")
    p.add_argument("--export", type=Path, default=None, metavar="PATH",
                   help="render one viewport to PATH (.png/.jpg/.svg) and exit, no window")
    p.add_argument("--scroll-x", type=float, default=0.0, help="scroll position used with --export")
    return p.parse_args(argv)


def main(argv=None) -> None:
    args = _parse_args(argv)
    configure_logging(logging.DEBUG if args.debug else logging.INFO, log_file=args.log_file)

    if isinstance(args.seed, str) and args.seed.lower() == "random":
        seed = random.randint(0, 2**31 - 1)
    else:
        seed = int(args.seed)

    common = dict(
        seed=seed,
        width=int(args.width),
        height=int(args.height),
        chunk_width=float(args.chunk_width),
        max_cached=int(args.max_cached),
        preload=int(args.preload),
        caching=bool(args.caching),
        noise_mode=str(args.noise),
    )

    if args.export is not None:
        export_viewport(args.export, scroll_x=float(args.scroll_x), **common)
        return

    run_app(scroll_speed=float(args.scroll_speed), debug=bool(args.debug), **common)


if __name__ == "__main__":
    main()
