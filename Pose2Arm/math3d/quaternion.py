"""Quaternion utilities for right-handed coordinates.

Storage order is [w, x, y, z]. The arm model frame is x right, y up and
-z forward, so the pointing direction of an orientation q is q * (0, 0, -1).
"""

from __future__ import annotations

import math

import numpy as np

from .coords import vec_angle_rad

FORWARD = np.array([0.0, 0.0, -1.0], dtype=np.float64)


def q_identity() -> np.ndarray:
    return np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float64)


def q_normalize(q: np.ndarray) -> np.ndarray:
    q = np.asarray(q, dtype=np.float64)
    n = float(np.linalg.norm(q))
    if n < 1e-12:
        return q_identity()
    return q / n


def q_conj(q: np.ndarray) -> np.ndarray:
    return np.array([q[0], -q[1], -q[2], -q[3]], dtype=np.float64)


def q_inverse(q: np.ndarray) -> np.ndarray:
    q = np.asarray(q, dtype=np.float64)
    n2 = float(np.dot(q, q))
    if n2 < 1e-24:
        return q_identity()
    return q_conj(q) / n2


def q_mul(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    aw, ax, ay, az = a
    bw, bx, by, bz = b
    return np.array(
        [
            aw * bw - ax * bx - ay * by - az * bz,
            aw * bx + ax * bw + ay * bz - az * by,
            aw * by - ax * bz + ay * bw + az * bx,
            aw * bz + ax * by - ay * bx + az * bw,
        ],
        dtype=np.float64,
    )


def q_rotate_vec(q: np.ndarray, v: np.ndarray, normalize: bool = True) -> np.ndarray:
    """Rotate vector v by unit quaternion q: v' = q*(0,v)*q^{-1}.

    With normalize=False q is used as given: v' = q*(0,v)*conj(q), which
    scales the result by |q|^2 when q is not unit length.
    """
    if normalize:
        q = q_normalize(q)
    vq = np.array([0.0, float(v[0]), float(v[1]), float(v[2])], dtype=np.float64)
    return q_mul(q_mul(q, vq), q_conj(q))[1:]


def q_slerp(a: np.ndarray, b: np.ndarray, t: float) -> np.ndarray:
    """Shortest-path spherical interpolation, t=0 -> a, t=1 -> b."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    t = float(t)
    if t == 0.0:
        return a.copy()
    if t == 1.0:
        return b.copy()

    cos_half = float(np.dot(a, b))
    if cos_half < 0.0:
        b = -b
        cos_half = -cos_half
    if cos_half >= 1.0:
        return a.copy()

    sin_half_sq = 1.0 - cos_half * cos_half
    if sin_half_sq <= 1e-12:
        return q_normalize((1.0 - t) * a + t * b)

    sin_half = math.sqrt(sin_half_sq)
    half = math.atan2(sin_half, cos_half)
    ra = math.sin((1.0 - t) * half) / sin_half
    rb = math.sin(t * half) / sin_half
    return ra * a + rb * b


def axis_angle_to_q(axis: np.ndarray, angle_rad: float) -> np.ndarray:
    axis = np.asarray(axis, dtype=np.float64)
    axis = axis / (np.linalg.norm(axis) + 1e-12)
    s = math.sin(angle_rad / 2.0)
    return q_normalize(
        np.array(
            [math.cos(angle_rad / 2.0), axis[0] * s, axis[1] * s, axis[2] * s],
            dtype=np.float64,
        )
    )


def euler_yaw_pitch_roll_to_q(
    yaw_deg: float, pitch_deg: float, roll_deg: float
) -> np.ndarray:
    """
    Right-handed coordinates:
      x: right, y: up, -z: forward
    Euler:
      yaw around +y, pitch around +x, roll around +z
    Composition: q = q_yaw * q_pitch * q_roll (intrinsic Y, X, Z)
    """
    yaw = math.radians(yaw_deg)
    pitch = math.radians(pitch_deg)
    roll = math.radians(roll_deg)
    q_yaw = axis_angle_to_q(np.array([0.0, 1.0, 0.0]), yaw)
    q_pitch = axis_angle_to_q(np.array([1.0, 0.0, 0.0]), pitch)
    q_roll = axis_angle_to_q(np.array([0.0, 0.0, 1.0]), roll)
    return q_normalize(q_mul(q_mul(q_yaw, q_pitch), q_roll))


def q_to_euler_yaw_pitch_roll(q: np.ndarray) -> tuple[float, float, float]:
    """Inverse of euler_yaw_pitch_roll_to_q, in radians.

    Near gimbal lock (|pitch| -> 90 deg) yaw and roll share an axis; the
    combined rotation is reported as yaw and roll is 0.
    """
    w, x, y, z = (float(c) for c in q_normalize(q))
    m11 = 1.0 - 2.0 * (y * y + z * z)
    m13 = 2.0 * (x * z + w * y)
    m21 = 2.0 * (x * y + w * z)
    m22 = 1.0 - 2.0 * (x * x + z * z)
    m23 = 2.0 * (y * z - w * x)
    m31 = 2.0 * (x * z - w * y)
    m33 = 1.0 - 2.0 * (x * x + y * y)

    pitch = math.asin(-min(max(m23, -1.0), 1.0))
    if abs(m23) < 0.9999999:
        yaw = math.atan2(m13, m33)
        roll = math.atan2(m21, m22)
    else:
        yaw = math.atan2(-m31, m11)
        roll = 0.0
    return yaw, pitch, roll


def q_yaw_only(q: np.ndarray) -> np.ndarray:
    """Keep the yaw of q, drop pitch and roll."""
    yaw, _, _ = q_to_euler_yaw_pitch_roll(q)
    return axis_angle_to_q(np.array([0.0, 1.0, 0.0]), yaw)


def pointing_angle(a: np.ndarray, b: np.ndarray, forward: np.ndarray = FORWARD) -> float:
    """Angle (rad) between the forward vector rotated by a and by b.

    Roll about the pointing axis does not count.
    """
    return vec_angle_rad(q_rotate_vec(a, forward), q_rotate_vec(b, forward))
