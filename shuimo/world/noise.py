from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import numpy as np
from opensimplex import OpenSimplex


@dataclass(frozen=True)
class NoiseConfig:
    octaves: int = 4
    lacunarity: float = 2.0
    gain: float = 0.5
    base_freq: float = 0.004
    amplitude: float = 1.0
    ridge: float = 0.35  # 0 = plain fBm, 1 = fully ridged


class LatticeValueNoise:
    """Value noise over a 256x256 lattice that tiles the plane.

    Each lattice node gets a value in [0, 1) through a seeded permutation
    table; samples between nodes are blended with a quintic ease.
    """

    SIZE = 256

    def __init__(self, seed: int) -> None:
        self.seed = int(seed) & 0xFFFFFFFF
        rng = np.random.default_rng(self.seed)
        self._perm = np.tile(rng.permutation(self.SIZE), 2)
        self._values = rng.random(self.SIZE)

    def _node(self, xi: np.ndarray, yi: np.ndarray) -> np.ndarray:
        m = self.SIZE - 1
        return self._values[self._perm[self._perm[xi & m] + (yi & m)]]

    def noise(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        fx = np.floor(x)
        fy = np.floor(y)
        xi = fx.astype(np.int64)
        yi = fy.astype(np.int64)

        tx = x - fx
        ty = y - fy
        sx = tx ** 3 * (10.0 - 15.0 * tx + 6.0 * tx * tx)
        sy = ty ** 3 * (10.0 - 15.0 * ty + 6.0 * ty * ty)

        v00 = self._node(xi, yi)
        v10 = self._node(xi + 1, yi)
        v01 = self._node(xi, yi + 1)
        v11 = self._node(xi + 1, yi + 1)
        row0 = v00 + sx * (v10 - v00)
        row1 = v01 + sx * (v11 - v01)
        return row0 + sy * (row1 - row0)


def _shape(total: Union[np.ndarray, float], ridge: float) -> Union[np.ndarray, float]:
    ridged = 1.0 - np.abs(total)
    return (1.0 - ridge) * total + ridge * (ridged * 2.0 - 1.0)


class FBMFastNoise:
    def __init__(self, seed: int, cfg: NoiseConfig | None = None) -> None:
        self.seed = int(seed)
        self.cfg = cfg or NoiseConfig()
        self.base = LatticeValueNoise(seed)

    def grid(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        freq = self.cfg.base_freq
        amp = 1.0
        total = np.zeros(np.broadcast(x, y).shape, dtype=np.float64)
        norm = 0.0
        for _ in range(self.cfg.octaves):
            n = self.base.noise(x * freq, y * freq) * 2.0 - 1.0  # [-1,1)
            total += n * amp
            norm += amp
            freq *= self.cfg.lacunarity
            amp *= self.cfg.gain
        total = total / max(norm, 1e-9)
        return _shape(total, self.cfg.ridge) * self.cfg.amplitude

    def profile(self, xs: np.ndarray, row: float = 0.0) -> np.ndarray:
        """Sample one horizontal line of the field (used for ridge lines)."""
        xs = np.asarray(xs, dtype=np.float64)
        return self.grid(xs, np.full_like(xs, row))

    def value(self, x: float, y: float) -> float:
        return float(self.grid(np.array([x]), np.array([y]))[0])


class FBMSimplexNoise:
    """Simplex-based fBm. Slower, smoother ridges."""

    def __init__(self, seed: int, cfg: NoiseConfig | None = None) -> None:
        self.seed = int(seed)
        self.cfg = cfg or NoiseConfig()
        self._simp = OpenSimplex(self.seed)

    def value(self, x: float, y: float) -> float:
        freq = self.cfg.base_freq
        amp = 1.0
        total = 0.0
        norm = 0.0
        for _ in range(self.cfg.octaves):
            total += self._simp.noise2(x * freq, y * freq) * amp
            norm += amp
            freq *= self.cfg.lacunarity
            amp *= self.cfg.gain
        total = total / max(norm, 1e-9)
        return float(_shape(total, self.cfg.ridge)) * self.cfg.amplitude

    def profile(self, xs: np.ndarray, row: float = 0.0) -> np.ndarray:
        return np.array([self.value(float(x), row) for x in np.asarray(xs, dtype=np.float64)])


def make_noise(seed: int, cfg: NoiseConfig | None = None, mode: str = "fast"):
    if mode == "simplex":
        return FBMSimplexNoise(seed, cfg)
    if mode == "fast":
        return FBMFastNoise(seed, cfg)
    raise ValueError(f"Unknown noise mode: {mode!r} (expected 'fast' or 'simplex')")
