"""Closed-form inverse kinematics for OPW arms.

The target pose is decoupled at the wrist center: the base angle comes from
the wrist center's heading, the shoulder and elbow angles from the planar
triangle (shoulder, elbow, wrist center), and the three wrist angles from the
rotation left over after the arm's own rotation has been removed.

Each of the three steps has two answers, so a reachable pose yields up to
eight raw solutions::

    shoulder  FRONT  the arm faces the wrist center
              BACK   the base is turned half a revolution and the arm
                     reaches over its own base axis
    elbow     UP     the elbow lies above the shoulder/wrist-center line
              DOWN   the elbow lies below it
    wrist     flip   (q4, q5, q6) -> (q4 + pi, -q5, q6 - pi)

Raw solutions are neither normalized nor checked against joint limits; see
:mod:`opwkin.kinematics.selection` for that.
"""

import math
from dataclasses import dataclass
from enum import IntEnum
from logging import getLogger

import numpy as np
from numpy.typing import NDArray

from .params import GeometricParameters
from .pose import Pose
from .transforms import rot_y, rot_z

logger = getLogger(__name__)

REACH_TOLERANCE = 1e-9
SINGULARITY_TOLERANCE = 1e-8

_ArmAngles = tuple[float, float]
_WristAngles = tuple[float, float, float]


class Shoulder(IntEnum):
    FRONT = 0
    BACK = 1


class Elbow(IntEnum):
    UP = 0
    DOWN = 1


@dataclass(frozen=True, order=True)
class Branch:
    """Which of the eight closed-form branches a solution belongs to.

    Branches order as base-front before base-back, elbow-up before
    elbow-down, unflipped wrist before flipped wrist.
    """

    shoulder: Shoulder
    elbow: Elbow
    wrist_flip: bool

    @property
    def index(self) -> int:
        """Position 0..7 in the fixed enumeration order."""
        return 4 * int(self.shoulder) + 2 * int(self.elbow) + int(self.wrist_flip)

    @classmethod
    def from_index(cls, index: int) -> "Branch":
        if not 0 <= index < 8:
            raise ValueError(f"Branch index must be in [0, 8), got {index}")
        return cls(
            shoulder=Shoulder(index // 4),
            elbow=Elbow((index // 2) % 2),
            wrist_flip=bool(index % 2),
        )


BRANCH_ORDER: tuple[Branch, ...] = tuple(Branch.from_index(i) for i in range(8))


@dataclass(frozen=True, eq=False)
class IKSolution:
    """One joint configuration together with its branch and validity flag.

    Attributes:
        joints: (6,) joint angles in radians.
        branch: Branch the configuration was derived on.
        valid: False once the configuration has been rejected by joint limits.
    """

    joints: NDArray[np.float64]
    branch: Branch
    valid: bool = True


SolutionSet = tuple[IKSolution, ...]


def _solve_arm_plane(
    reach: float,
    height: float,
    upper_arm: float,
    forearm: float,
    forearm_angle: float,
    reach_tolerance: float,
) -> tuple[_ArmAngles, _ArmAngles] | None:
    """Shoulder/elbow angles placing the wrist center at (reach, height).

    The shoulder is at the origin of the arm plane. ``forearm`` and
    ``forearm_angle`` are the distance and angle from the elbow to the wrist
    center, which include the elbow offset ``a2``.

    Returns the (q2, q3) pairs with the upper arm turned by -alpha and by
    +alpha from the shoulder/wrist-center line, or None when the triangle
    cannot be closed.
    """
    dist_sq = reach * reach + height * height
    dist = math.sqrt(dist_sq)

    shoulder_denom = 2.0 * dist * upper_arm
    elbow_denom = 2.0 * upper_arm * forearm
    if shoulder_denom <= 0.0 or elbow_denom <= 0.0:
        return None

    cos_shoulder = (dist_sq + upper_arm**2 - forearm**2) / shoulder_denom
    cos_elbow = (dist_sq - upper_arm**2 - forearm**2) / elbow_denom
    if abs(cos_shoulder) > 1.0 + reach_tolerance or abs(cos_elbow) > 1.0 + reach_tolerance:
        return None

    # Clamp to keep acos finite at the reach boundary.
    alpha = math.acos(min(1.0, max(-1.0, cos_shoulder)))
    gamma = math.acos(min(1.0, max(-1.0, cos_elbow)))
    line = math.atan2(reach, height)

    return (line - alpha, gamma - forearm_angle), (line + alpha, -gamma - forearm_angle)


def _solve_wrist(
    rotation: NDArray[np.float64],
    q1: float,
    q23: float,
    q4_seed: float,
    singularity_tolerance: float,
) -> tuple[_WristAngles, _WristAngles]:
    """Decompose the remaining rotation as Rz(q4) Ry(q5) Rz(q6).

    Returns the unflipped and flipped wrist triples. When the wrist is
    singular, q4 is taken from the seed and q6 absorbs the rest of the roll.
    The flipped triple is then the same physical wrist with q4 half a turn
    away from the seed, since q5 stays at 0 or pi.
    """
    r_0c = (rot_z(q1) @ rot_y(q23))[:3, :3]
    r_ce = r_0c.T @ rotation

    sin5 = math.hypot(r_ce[0, 2], r_ce[1, 2])
    if sin5 < singularity_tolerance:
        # Gimbal lock: q4 and q6 share one axis, only their sum (or difference) is fixed.
        q4 = q4_seed
        if r_ce[2, 2] > 0.0:
            q5 = 0.0
            q6 = math.atan2(r_ce[1, 0], r_ce[0, 0]) - q4
        else:
            q5 = math.pi
            q6 = q4 - math.atan2(-r_ce[1, 0], r_ce[1, 1])
        logger.debug("Singular wrist (sin(q5)=%.3e), q4 fixed to %.6f", sin5, q4)
    else:
        q5 = math.atan2(sin5, r_ce[2, 2])
        q4 = math.atan2(r_ce[1, 2], r_ce[0, 2])
        q6 = math.atan2(r_ce[2, 1], -r_ce[2, 0])

    return (q4, q5, q6), (q4 + math.pi, -q5, q6 - math.pi)


def inverse_raw(
    pose: Pose,
    params: GeometricParameters,
    seed: NDArray[np.float64] | None = None,
    reach_tolerance: float = REACH_TOLERANCE,
    singularity_tolerance: float = SINGULARITY_TOLERANCE,
) -> SolutionSet:
    """All closed-form joint configurations reaching ``pose``.

    Args:
        pose: Target flange pose in the base frame.
        params: Geometry of the arm.
        seed: (6,) joint configuration whose wrist-roll angle is kept when
            the wrist is singular. Zero when omitted.
        reach_tolerance: How far a law-of-cosines argument may leave [-1, 1]
            before the branch counts as out of reach.
        singularity_tolerance: ``sin(q5)`` below which the wrist is treated as
            singular.

    Returns:
        Up to eight :class:`IKSolution` in branch order. Unreachable branches
        are left out, so an empty tuple means the pose is out of reach.
    """
    p = params
    rotation = pose.rotation
    center = pose.translation - p.c4 * rotation[:, 2]
    cx, cy, cz = (float(v) for v in center)

    radial_sq = cx * cx + cy * cy - p.b * p.b
    if radial_sq < -reach_tolerance:
        logger.debug("Wrist center %s is inside the lateral offset cylinder", center)
        return ()
    radial = math.sqrt(max(radial_sq, 0.0))

    heading = math.atan2(cy, cx)
    lateral = math.atan2(p.b, radial)
    height = cz - p.c1
    forearm = math.hypot(p.a2, p.c3)
    forearm_angle = math.atan2(p.a2, p.c3)

    q4_seed = 0.0
    if seed is not None:
        q4_seed = float(p.to_model(np.asarray(seed, dtype=np.float64).reshape(-1))[3])

    solutions: list[IKSolution] = []
    for shoulder in Shoulder:
        if shoulder is Shoulder.FRONT:
            q1 = heading - lateral
            reach = radial - p.a1
        else:
            q1 = heading + lateral - math.pi
            reach = -(radial + p.a1)

        arm = _solve_arm_plane(reach, height, p.c2, forearm, forearm_angle, reach_tolerance)
        if arm is None:
            logger.debug("Shoulder %s branch cannot reach the wrist center", shoulder.name)
            continue

        minus, plus = arm
        elbow_sides = {Elbow.UP: minus, Elbow.DOWN: plus}
        if shoulder is Shoulder.BACK:
            elbow_sides = {Elbow.UP: plus, Elbow.DOWN: minus}

        for elbow in Elbow:
            q2, q3 = elbow_sides[elbow]
            wrists = _solve_wrist(rotation, q1, q2 + q3, q4_seed, singularity_tolerance)
            for wrist_flip, (q4, q5, q6) in zip((False, True), wrists):
                model = np.array([q1, q2, q3, q4, q5, q6])
                if p.has_parallelogram:
                    model[2] -= model[1]
                solutions.append(
                    IKSolution(
                        joints=p.to_joint(model),
                        branch=Branch(shoulder, elbow, wrist_flip),
                    )
                )

    return tuple(solutions)
