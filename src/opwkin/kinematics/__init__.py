"""Kinematics module for opwkin: closed-form FK and IK for OPW arms."""

from .errors import IKErrorKind, InvalidParameterError
from .forward import forward, forward_matrix, wrist_center
from .inverse import BRANCH_ORDER, Branch, Elbow, IKSolution, Shoulder, SolutionSet, inverse_raw
from .params import GeometricParameters
from .pose import Pose
from .robot_params import (
    abb_irb2400,
    abb_irb2400_limits,
    kuka_kr6_r700_sixx,
    kuka_kr6_r700_sixx_limits,
)
from .selection import (
    JointLimits,
    SelectionMode,
    SelectionResult,
    nearest_in_limits,
    normalize_joints,
    select,
)
from .solver import OPWSolver, SolverConfig

__all__ = [
    "BRANCH_ORDER",
    "Branch",
    "Elbow",
    "GeometricParameters",
    "IKErrorKind",
    "IKSolution",
    "InvalidParameterError",
    "JointLimits",
    "OPWSolver",
    "Pose",
    "SelectionMode",
    "SelectionResult",
    "Shoulder",
    "SolutionSet",
    "SolverConfig",
    "abb_irb2400",
    "abb_irb2400_limits",
    "forward",
    "forward_matrix",
    "inverse_raw",
    "kuka_kr6_r700_sixx",
    "kuka_kr6_r700_sixx_limits",
    "nearest_in_limits",
    "normalize_joints",
    "select",
    "wrist_center",
]
