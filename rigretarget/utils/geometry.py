"""
Quaternion and transform helpers for retargeting.

All quaternions are stored [x, y, z, w] (the order keyframe tracks and
scipy use). Functions accept a single quaternion (4,) or a batch (N, 4).
"""
from __future__ import annotations

import numpy as np
from scipy.spatial.transform import Rotation as R

IDENTITY_QUAT = np.array([0.0, 0.0, 0.0, 1.0])


def as_quat_array(q) -> np.ndarray:
    """Coerce to a float64 array with a trailing dimension of 4."""
    arr = np.asarray(q, dtype=np.float64)
    if arr.shape[-1:] != (4,):
        raise ValueError(f"Expected quaternion(s) with 4 components, got shape {arr.shape}")
    return arr


def quaternion_multiply(q1, q2) -> np.ndarray:
    """Hamilton product q1 * q2 of [x, y, z, w] quaternions (broadcasts)."""
    q1 = as_quat_array(q1)
    q2 = as_quat_array(q2)
    x1, y1, z1, w1 = np.moveaxis(q1, -1, 0)
    x2, y2, z2, w2 = np.moveaxis(q2, -1, 0)
    return np.stack(
        [
            w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
            w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
        ],
        axis=-1,
    )


def quaternion_inverse(q) -> np.ndarray:
    """Inverse of [x, y, z, w] quaternion(s)."""
    q = as_quat_array(q)
    conj = q * np.array([-1.0, -1.0, -1.0, 1.0])
    return conj / np.sum(q**2, axis=-1, keepdims=True)


def quaternion_norm(q) -> np.ndarray:
    return np.linalg.norm(as_quat_array(q), axis=-1)


def quaternion_to_matrix(q) -> np.ndarray:
    """3x3 rotation matrix of a single [x, y, z, w] quaternion."""
    return R.from_quat(as_quat_array(q)).as_matrix()


def matrix_to_quaternion(mat: np.ndarray) -> np.ndarray:
    """Convert a 4x4 or 3x3 matrix to an [x, y, z, w] quaternion, stripping scale."""
    m33 = np.array(mat, dtype=np.float64)[:3, :3]
    # Orthonormalize basis vectors (columns) to strip scaling
    for i in range(3):
        norm = np.linalg.norm(m33[:, i])
        if norm > 1e-9:
            m33[:, i] /= norm
    return R.from_matrix(m33).as_quat()


def compose_matrix(translation, rotation, scale) -> np.ndarray:
    """Build a 4x4 matrix T * R * S (column vectors)."""
    mat = np.eye(4)
    mat[:3, :3] = quaternion_to_matrix(rotation) * np.asarray(scale, dtype=np.float64)
    mat[:3, 3] = np.asarray(translation, dtype=np.float64)
    return mat
