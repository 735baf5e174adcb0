"""Vector and angle helpers."""

from __future__ import annotations

import math

import numpy as np


def clamp(value: float, lo: float, hi: float) -> float:
    return min(max(value, lo), hi)


def vec_angle_rad(a: np.ndarray, b: np.ndarray) -> float:
    """Angle between two vectors in [0, pi]; 0 when either is degenerate."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    denom = float(np.linalg.norm(a) * np.linalg.norm(b))
    if denom < 1e-12:
        return 0.0
    return math.acos(clamp(float(np.dot(a, b)) / denom, -1.0, 1.0))


def vec_to_az_el_deg(v: np.ndarray) -> tuple[float, float]:
    """
    Pointing convention of the arm model frame (x right, y up, -z forward):
      az: atan2(x, -z)  => 0=forward, +90=right
      el: atan2(y, sqrt(x^2+z^2))
    """
    x, y, z = float(v[0]), float(v[1]), float(v[2])
    az = math.degrees(math.atan2(x, -z))
    el = math.degrees(math.atan2(y, math.sqrt(x * x + z * z) + 1e-12))
    return az, el
