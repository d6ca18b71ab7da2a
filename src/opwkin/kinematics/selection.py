"""Joint-limit validation and seed-based selection of raw IK solutions."""

import math
from dataclasses import dataclass
from enum import Enum
from logging import getLogger
from typing import Iterable

import numpy as np
from numpy.typing import NDArray

from .errors import IKErrorKind
from .inverse import IKSolution, SolutionSet
from .params import N_JOINTS
from .transforms import wrap_angle

logger = getLogger(__name__)

_TWO_PI = 2.0 * math.pi
_LIMIT_EPS = 1e-12

Bound = tuple[float, float] | None


class SelectionMode(Enum):
    SINGLE = "single"
    ALL = "all"


@dataclass(frozen=True)
class JointLimits:
    """Closed per-joint intervals in radians. ``None`` leaves a joint unconstrained."""

    bounds: tuple[Bound, ...] = (None,) * N_JOINTS

    def __post_init__(self) -> None:
        if len(self.bounds) != N_JOINTS:
            raise ValueError(f"Expected {N_JOINTS} joint bounds, got {len(self.bounds)}")
        bounds: list[Bound] = []
        for i, bound in enumerate(self.bounds):
            if bound is None:
                bounds.append(None)
                continue
            lower, upper = float(bound[0]), float(bound[1])
            if math.isnan(lower) or math.isnan(upper):
                raise ValueError(f"Joint {i} limits must not be NaN, got {bound}")
            if lower > upper:
                raise ValueError(f"Joint {i} lower limit {lower} exceeds upper limit {upper}")
            bounds.append((lower, upper))
        object.__setattr__(self, "bounds", tuple(bounds))

    @classmethod
    def unbounded(cls) -> "JointLimits":
        return cls()

    @classmethod
    def from_arrays(cls, lower: Iterable[float], upper: Iterable[float]) -> "JointLimits":
        """Build from lower/upper arrays. A joint with both bounds infinite is unconstrained."""
        lower, upper = list(lower), list(upper)
        if len(lower) != len(upper):
            raise ValueError(f"Got {len(lower)} lower and {len(upper)} upper limits")
        bounds: list[Bound] = []
        for lo, hi in zip(lower, upper):
            if math.isinf(lo) and math.isinf(hi) and lo < hi:
                bounds.append(None)
            else:
                bounds.append((lo, hi))
        return cls(tuple(bounds))

    @property
    def lower(self) -> NDArray[np.float64]:
        return np.array([-np.inf if b is None else b[0] for b in self.bounds])

    @property
    def upper(self) -> NDArray[np.float64]:
        return np.array([np.inf if b is None else b[1] for b in self.bounds])


@dataclass(frozen=True)
class SelectionResult:
    """Outcome of :func:`select`.

    Attributes:
        solutions: Selected solutions in branch order; a single entry for
            :attr:`SelectionMode.SINGLE`. Empty on failure.
        error: Why no solution was returned, None on success.
    """

    solutions: SolutionSet = ()
    error: IKErrorKind | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def solution(self) -> NDArray[np.float64] | None:
        """Joint angles of the first selected solution, if any."""
        if not self.solutions:
            return None
        return self.solutions[0].joints


def normalize_joints(
    joint_angles_rad: NDArray[np.float64], limits: JointLimits | None = None
) -> NDArray[np.float64] | None:
    """Shift each angle by whole turns into its joint's limits.

    Angles are first wrapped to (-pi, pi]. A joint whose wrapped angle lies
    outside its interval is moved by the fewest turns that bring it inside.

    Returns:
        The normalized (6,) array, or None when some joint has no
        representative inside its interval.
    """
    q = wrap_angle(np.asarray(joint_angles_rad, dtype=np.float64).reshape(-1))
    if q.shape != (N_JOINTS,):
        raise ValueError(f"Expected {N_JOINTS} joint angles, got {q.size}")
    if not np.all(np.isfinite(q)):
        return None
    return _shift_into_limits(q, limits)


def nearest_in_limits(
    joint_angles_rad: NDArray[np.float64],
    reference_rad: NDArray[np.float64],
    limits: JointLimits | None = None,
) -> NDArray[np.float64] | None:
    """Shift each angle by whole turns to the in-limit value closest to ``reference_rad``.

    Each angle is first moved to within half a turn of its reference. If that
    value lies outside the joint's interval, it is moved by the fewest turns
    that bring it inside, which is then the in-limit value nearest the
    reference.

    Returns:
        The shifted (6,) array, or None when some joint has no
        representative inside its interval.
    """
    q = np.asarray(joint_angles_rad, dtype=np.float64).reshape(-1)
    ref = np.asarray(reference_rad, dtype=np.float64).reshape(-1)
    if q.shape != (N_JOINTS,):
        raise ValueError(f"Expected {N_JOINTS} joint angles, got {q.size}")
    if ref.shape != (N_JOINTS,):
        raise ValueError(f"Expected {N_JOINTS} reference angles, got {ref.size}")
    if not np.all(np.isfinite(q)):
        return None
    q = q + _TWO_PI * np.round((ref - q) / _TWO_PI)
    return _shift_into_limits(q, limits)


def _shift_into_limits(
    q: NDArray[np.float64], limits: JointLimits | None
) -> NDArray[np.float64] | None:
    if limits is None:
        return q
    lower, upper = limits.lower, limits.upper
    below = q < lower - _LIMIT_EPS
    above = q > upper + _LIMIT_EPS
    with np.errstate(invalid="ignore"):
        q = np.where(below, q + _TWO_PI * np.ceil((lower - q) / _TWO_PI), q)
        q = np.where(above, q - _TWO_PI * np.ceil((q - upper) / _TWO_PI), q)

    if np.any(q < lower - _LIMIT_EPS) or np.any(q > upper + _LIMIT_EPS):
        return None
    return q


def select(
    raw: SolutionSet,
    limits: JointLimits | None = None,
    seed: NDArray[np.float64] | None = None,
    mode: SelectionMode = SelectionMode.SINGLE,
) -> SelectionResult:
    """Filter raw solutions by joint limits and pick the requested subset.

    Args:
        raw: Solutions from :func:`~opwkin.kinematics.inverse.inverse_raw`.
            Entries already flagged invalid are skipped.
        limits: Joint limits; unconstrained when None.
        seed: (6,) reference configuration for :attr:`SelectionMode.SINGLE`.
            The zero configuration when omitted.
        mode: Return the solution closest to the seed, or every valid one.

    Returns:
        SelectionResult. Ties in distance to the seed resolve to the earliest
        branch in the fixed branch order.
    """
    if not raw:
        return SelectionResult(error=IKErrorKind.UNREACHABLE)

    valid: list[IKSolution] = []
    for sol in sorted(raw, key=lambda s: s.branch.index):
        if not sol.valid:
            continue
        q = normalize_joints(sol.joints, limits)
        if q is None:
            logger.debug("Branch %d rejected by joint limits: %s", sol.branch.index, sol.joints)
            continue
        valid.append(IKSolution(joints=q, branch=sol.branch))

    if not valid:
        return SelectionResult(error=IKErrorKind.NO_SOLUTION_WITHIN_LIMITS)

    if mode is SelectionMode.ALL:
        return SelectionResult(solutions=tuple(valid))

    if seed is None:
        target = np.zeros(N_JOINTS)
    else:
        target = np.asarray(seed, dtype=np.float64).reshape(-1)
        if target.shape != (N_JOINTS,):
            raise ValueError(f"Expected {N_JOINTS} seed angles, got {target.size}")

    # Joints with more than one turn of range are compared at the turn nearest the seed.
    candidates: list[IKSolution] = []
    for sol in valid:
        q = nearest_in_limits(sol.joints, target, limits)
        if q is not None:
            candidates.append(IKSolution(joints=q, branch=sol.branch))

    distances = np.array([np.sum((s.joints - target) ** 2) for s in candidates])
    # argmin returns the first minimum, i.e. the earliest branch.
    best = candidates[int(np.argmin(distances))]
    logger.debug("Selected branch %d of %d valid solutions", best.branch.index, len(valid))
    return SelectionResult(solutions=(best,))
