"""OPW solver: one arm geometry bound to its limits and numeric policy."""

from dataclasses import dataclass, field
from logging import getLogger
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from .forward import forward
from .inverse import REACH_TOLERANCE, SINGULARITY_TOLERANCE, SolutionSet, inverse_raw
from .params import N_JOINTS, GeometricParameters
from .pose import Pose
from .selection import JointLimits, SelectionMode, SelectionResult, select

logger = getLogger(__name__)

DEFAULT_JOINT_NAMES = ("joint_1", "joint_2", "joint_3", "joint_4", "joint_5", "joint_6")


@dataclass
class SolverConfig:
    """Numeric policy of the solver.

    Attributes:
        reach_tolerance: How far a law-of-cosines argument may exceed [-1, 1]
            and still be clamped instead of rejected.
        singularity_tolerance: ``sin(q5)`` below which the wrist is singular
            and q4 is taken from the seed.
        pose_tolerance: Element-wise tolerance used by :meth:`OPWSolver.reaches`.
    """

    reach_tolerance: float = REACH_TOLERANCE
    singularity_tolerance: float = SINGULARITY_TOLERANCE
    pose_tolerance: float = 1e-6


@dataclass(frozen=True)
class OPWSolver:
    """Forward and inverse kinematics for one arm.

    The solver holds only immutable values, so one instance can be shared
    between threads.
    """

    params: GeometricParameters
    limits: JointLimits = field(default_factory=JointLimits.unbounded)
    joint_names: Sequence[str] = DEFAULT_JOINT_NAMES
    config: SolverConfig = field(default_factory=SolverConfig)

    def __post_init__(self) -> None:
        if len(self.joint_names) != N_JOINTS:
            raise ValueError(f"Expected {N_JOINTS} joint names, got {len(self.joint_names)}")
        object.__setattr__(self, "joint_names", tuple(self.joint_names))

    def forward(self, joint_angles_rad: NDArray[np.float64]) -> Pose:
        return forward(joint_angles_rad, self.params)

    def inverse_raw(
        self, pose: Pose, seed: NDArray[np.float64] | None = None
    ) -> SolutionSet:
        return inverse_raw(
            pose,
            self.params,
            seed=seed,
            reach_tolerance=self.config.reach_tolerance,
            singularity_tolerance=self.config.singularity_tolerance,
        )

    def solve(
        self, pose: Pose, seed: NDArray[np.float64] | None = None
    ) -> SelectionResult:
        """The valid solution closest to ``seed``."""
        raw = self.inverse_raw(pose, seed=seed)
        return select(raw, self.limits, seed=seed, mode=SelectionMode.SINGLE)

    def solve_all(
        self, pose: Pose, seed: NDArray[np.float64] | None = None
    ) -> SelectionResult:
        """Every valid solution in branch order.

        ``seed`` only matters for a singular wrist.
        """
        raw = self.inverse_raw(pose, seed=seed)
        return select(raw, self.limits, seed=seed, mode=SelectionMode.ALL)

    def solve_many(
        self, poses: Sequence[Pose], seed: NDArray[np.float64] | None = None
    ) -> list[SelectionResult]:
        """Solve a sequence of poses.

        Each solve is seeded with the last successful solution, starting from
        ``seed``. A failed pose does not stop the batch.
        """
        results: list[SelectionResult] = []
        current = seed
        for i, pose in enumerate(poses):
            result = self.solve(pose, seed=current)
            if result.success:
                current = result.solution
            else:
                logger.debug("Pose %d of %d failed: %s", i, len(poses), result.error)
            results.append(result)
        return results

    def reaches(self, joint_angles_rad: NDArray[np.float64], pose: Pose) -> bool:
        """Whether ``joint_angles_rad`` places the flange at ``pose``."""
        return self.forward(joint_angles_rad).is_close(pose, atol=self.config.pose_tolerance)
