"""Closed-form forward kinematics for OPW arms."""

import numpy as np
from numpy.typing import NDArray

from .params import N_JOINTS, GeometricParameters
from .pose import Pose
from .transforms import rot_y, rot_z, translation


def model_angles(
    joint_angles_rad: NDArray[np.float64], params: GeometricParameters
) -> NDArray[np.float64]:
    """Joint readings -> the six angles the chain is composed from.

    With a parallelogram-driven forearm the elbow's effective angle also
    carries the shoulder angle.
    """
    q = np.asarray(joint_angles_rad, dtype=np.float64).reshape(-1)
    if q.shape != (N_JOINTS,):
        raise ValueError(f"Expected {N_JOINTS} joint angles, got {q.size}")
    q = params.to_model(q)
    if params.has_parallelogram:
        q[2] += q[1]
    return q


def forward_matrix(
    joint_angles_rad: NDArray[np.float64], params: GeometricParameters
) -> NDArray[np.float64]:
    """Compute the 4x4 homogeneous transform from base to tool flange.

    The chain is::

        Rz(q1) T(a1, b, c1) Ry(q2) T(0, 0, c2) Ry(q3) T(a2, 0, c3)
        Rz(q4) Ry(q5) Rz(q6) T(0, 0, c4)

    Args:
        joint_angles_rad: (6,) joint readings in radians. Not range checked.
        params: Geometry of the arm.

    Returns:
        4x4 homogeneous transformation matrix.
    """
    q = model_angles(joint_angles_rad, params)
    p = params

    T = rot_z(q[0]) @ translation(p.a1, p.b, p.c1)
    T = T @ rot_y(q[1]) @ translation(0.0, 0.0, p.c2)
    T = T @ rot_y(q[2]) @ translation(p.a2, 0.0, p.c3)
    T = T @ rot_z(q[3]) @ rot_y(q[4]) @ rot_z(q[5])
    T = T @ translation(0.0, 0.0, p.c4)
    return T


def forward(joint_angles_rad: NDArray[np.float64], params: GeometricParameters) -> Pose:
    """Tool pose for a joint configuration. Defined for every real input."""
    return Pose.from_matrix(forward_matrix(joint_angles_rad, params))


def wrist_center(
    joint_angles_rad: NDArray[np.float64], params: GeometricParameters
) -> NDArray[np.float64]:
    """Position of the point where the three wrist axes intersect."""
    T = forward_matrix(joint_angles_rad, params)
    return T[:3, 3] - params.c4 * T[:3, 2]
