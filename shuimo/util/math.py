from __future__ import annotations
import numpy as np

def identity() -> np.ndarray:
    return np.eye(3, dtype=np.float64)

def translation(dx: float, dy: float) -> np.ndarray:
    m = identity()
    m[0, 2] = dx
    m[1, 2] = dy
    return m

def rotation(angle: float) -> np.ndarray:
    """Counter-clockwise rotation by `angle` radians (y axis points down on screen)."""
    c = float(np.cos(angle))
    s = float(np.sin(angle))
    m = identity()
    m[0, 0] = c; m[0, 1] = -s
    m[1, 0] = s; m[1, 1] = c
    return m

def scaling(sx: float, sy: float) -> np.ndarray:
    m = identity()
    m[0, 0] = sx
    m[1, 1] = sy
    return m

def apply_affine(m: np.ndarray, points) -> np.ndarray:
    """Map (N,2) points through a 3x3 affine matrix. Returns an (N,2) float array."""
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    return pts @ m[:2, :2].T + m[:2, 2]

def exp_smooth(current: float, target: float, k: float, dt: float) -> float:
    alpha = 1.0 - float(np.exp(-k * dt))
    return current + (target - current) * alpha

def svg_matrix(m: np.ndarray) -> str:
    """SVG `matrix(a b c d e f)` for a 3x3 affine."""
    vals = (m[0, 0], m[1, 0], m[0, 1], m[1, 1], m[0, 2], m[1, 2])
    return "matrix(" + " ".join(f"{float(v) + 0.0:g}" for v in vals) + ")"
