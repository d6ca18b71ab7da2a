"""Homogeneous transformation utilities using only numpy."""

import numpy as np
from numpy.typing import NDArray


def rot_y(theta: float) -> NDArray[np.float64]:
    """4x4 rotation matrix about Y-axis. theta in radians."""
    c, s = np.cos(theta), np.sin(theta)
    return np.array([
        [c, 0.0, s, 0.0],
        [0.0, 1.0, 0.0, 0.0],
        [-s, 0.0, c, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])


def rot_z(theta: float) -> NDArray[np.float64]:
    """4x4 rotation matrix about Z-axis. theta in radians."""
    c, s = np.cos(theta), np.sin(theta)
    return np.array([
        [c, -s, 0.0, 0.0],
        [s, c, 0.0, 0.0],
        [0.0, 0.0, 1.0, 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])


def translation(x: float, y: float, z: float) -> NDArray[np.float64]:
    """4x4 pure translation matrix."""
    T = np.eye(4)
    T[0, 3] = x
    T[1, 3] = y
    T[2, 3] = z
    return T


def homogeneous(
    rotation: NDArray[np.float64], position: NDArray[np.float64]
) -> NDArray[np.float64]:
    """Assemble a 4x4 transform from a 3x3 rotation and a 3-vector."""
    T = np.eye(4)
    T[:3, :3] = rotation
    T[:3, 3] = position
    return T


def wrap_angle(theta: NDArray[np.float64] | float) -> NDArray[np.float64]:
    """Wrap angles to the half-open interval (-pi, pi]."""
    wrapped = np.pi - np.mod(np.pi - np.asarray(theta, dtype=np.float64), 2 * np.pi)
    return wrapped
