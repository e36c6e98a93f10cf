from __future__ import annotations

# Window
WINDOW_WIDTH = 1280
WINDOW_HEIGHT = 800
FPS_CAP = 60

# App
APP_VERSION = "0.4.1"

# Scene
DEFAULT_SEED = 12345
DEFAULT_NOISE = "fast"

# Chunks
DEFAULT_CHUNK_WIDTH = 512
DEFAULT_VIEWPORT_HEIGHT = WINDOW_HEIGHT
DEFAULT_MAX_CACHED_CHUNKS = 10
DEFAULT_PRELOAD_DISTANCE = 1  # chunks on each side of the visible range
DEFAULT_ENABLE_CACHING = False

# Scrolling
DEFAULT_SCROLL_SPEED = 420.0  # world px / sec while an arrow key is held
WHEEL_SCROLL_STEP = 96.0
SCROLL_SMOOTH_K = 9.0  # larger = faster follow

# Ink & paper (RGB 0..255)
PAPER_COLOR = (244, 238, 222)
INK_COLOR = (28, 26, 24)

# Landscape
MOUNTAIN_LAYERS = 3
MOUNTAIN_SAMPLE_STEP = 8.0  # px between ridge samples
TREES_PER_CHUNK = (2, 6)
TREE_MAX_DEPTH = 5

# Debug
STATS_LOG_INTERVAL_S = 1.0
